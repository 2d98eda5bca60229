# bookshelf/sa/repositories/__init__.py
from .base import Repository, default_registry, translate_integrity_error
from .user import UserRepository
from .book import BookRepository
from .subject import SubjectRepository
from .library import LibraryRepository
from .role import RoleRepository
from .borrow_request import BorrowRequestRepository
from .auth import AuthTokenRepository
from .security import SecurityRepository

__all__ = [
    'Repository',
    'default_registry',
    'translate_integrity_error',
    'UserRepository',
    'BookRepository',
    'SubjectRepository',
    'LibraryRepository',
    'RoleRepository',
    'BorrowRequestRepository',
    'AuthTokenRepository',
    'SecurityRepository',
]
