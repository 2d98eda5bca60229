import logging
from typing import List, Optional, Set
import uuid

from sqlalchemy import delete

from bookshelf.permissions import is_valid_permission
from bookshelf.sa.errors import InvalidInputError
from bookshelf.sa.models import Role, UserRole
from .base import Repository, as_uuid

logger = logging.getLogger(__name__)


class RoleRepository(Repository[Role]):
    model = Role

    def __init__(self, session, registry=None):
        super().__init__(session, registry=registry)
        self.assignments = Repository(session, UserRole, registry=self.registry)

    def get_by_name(self, name: str) -> Optional[Role]:
        return self.session.query(Role).filter(Role.name == name).first()

    def create_role(self, name: str, permissions: List[str], description: Optional[str] = None) -> Role:
        """Create a named permission set.

        Raises:
            InvalidInputError: If a permission string is not in the catalogue
            DuplicateEntryError: If a role with this name exists
        """
        unknown = [p for p in permissions if not is_valid_permission(p)]
        if unknown:
            raise InvalidInputError(f"Unknown permissions: {', '.join(unknown)}")
        return self.insert(name=name, permissions=list(permissions), description=description)

    def assign_role(self, user_id: uuid.UUID, role_id: uuid.UUID,
                    assigned_by: Optional[uuid.UUID] = None) -> UserRole:
        """Give a role to a user.

        Raises:
            DuplicateEntryError: If the user already holds the role
            ReferenceViolationError: If the user or role does not exist
        """
        assignment = self.assignments.insert(user_id=user_id, role_id=role_id, assigned_by=assigned_by)
        logger.info(f"Assigned role {role_id} to user {user_id}")
        return assignment

    def revoke_role(self, user_id: uuid.UUID, role_id: uuid.UUID) -> bool:
        with self.writing():
            result = self.session.execute(
                delete(UserRole)
                .where(UserRole.user_id == as_uuid(user_id), UserRole.role_id == as_uuid(role_id))
                .execution_options(synchronize_session=False)
            )
        return result.rowcount > 0

    def roles_for_user(self, user_id: uuid.UUID) -> List[Role]:
        return (
            self.session.query(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .filter(UserRole.user_id == as_uuid(user_id))
            .order_by(Role.name)
            .all()
        )

    def permissions_for_user(self, user_id: uuid.UUID) -> Set[str]:
        """Union of the permissions of every role the user holds"""
        permissions: Set[str] = set()
        for role in self.roles_for_user(user_id):
            permissions.update(role.permissions or [])
        return permissions
