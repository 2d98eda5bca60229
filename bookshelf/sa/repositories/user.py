import logging
from typing import Optional

from bookshelf.sa.models import User, UserAuth, UserRoleType
from .base import Repository

logger = logging.getLogger(__name__)


class UserRepository(Repository[User]):
    """Repository for managing User entities."""

    model = User

    def create_user(self, username: str, email: str, first_name: str, last_name: str,
                    role: UserRoleType = UserRoleType.USER,
                    hashed_password: Optional[str] = None) -> User:
        """Create a new user, optionally with password credentials.

        Args:
            username: Unique username
            email: Unique email address
            first_name: Given name
            last_name: Family name
            role: Coarse account role
            hashed_password: Already-hashed password; creates the UserAuth row when given

        Returns:
            The created User object

        Raises:
            DuplicateEntryError: If the username or email is already taken
        """
        with self.writing():
            user = self.build(
                username=username, email=email, first_name=first_name, last_name=last_name, role=role
            )
            if hashed_password is not None:
                self.session.flush()
                self.session.add(UserAuth(user_id=user.id, hashed_password=hashed_password))
        logger.info(f"Created user {username}")
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address; matches exactly, like the unique_email index"""
        return self.session.query(User).filter(User.email == email).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.session.query(User).filter(User.username == username).first()
