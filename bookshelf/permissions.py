"""Permission catalogue.

Permissions are ``resource:action`` strings with an optional ``:scope``
(e.g. ``user:read:own``). Roles store lists of them.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional


class ResourceType(str, Enum):
    USER = "user"
    BOOK = "book"
    LIBRARY = "library"
    LIBRARY_BOOK = "library_book"
    AUTHOR = "author"
    PUBLISHER = "publisher"
    SYSTEM = "system"
    AUDIT_LOG = "audit_log"
    ROLE = "role"
    PERMISSION = "permission"


class ActionType(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"
    LIST = "list"
    SEARCH = "search"
    EXPORT = "export"
    IMPORT = "import"
    APPROVE = "approve"
    REJECT = "reject"
    ASSIGN = "assign"
    REVOKE = "revoke"


class Permission:
    USER_CREATE = "user:create"
    USER_READ = "user:read"
    USER_READ_OWN = "user:read:own"
    USER_UPDATE = "user:update"
    USER_UPDATE_OWN = "user:update:own"
    USER_DELETE = "user:delete"
    USER_DELETE_OWN = "user:delete:own"
    USER_LIST = "user:list"
    USER_MANAGE = "user:manage"
    USER_SUSPEND = "user:suspend"
    USER_ACTIVATE = "user:activate"

    BOOK_CREATE = "book:create"
    BOOK_READ = "book:read"
    BOOK_UPDATE = "book:update"
    BOOK_DELETE = "book:delete"
    BOOK_LIST = "book:list"
    BOOK_SEARCH = "book:search"
    BOOK_MANAGE = "book:manage"
    BOOK_IMPORT = "book:import"
    BOOK_EXPORT = "book:export"
    BOOK_BULK_CREATE = "book:create:bulk"
    BOOK_BULK_UPDATE = "book:update:bulk"
    BOOK_BULK_DELETE = "book:delete:bulk"

    LIBRARY_CREATE = "library:create"
    LIBRARY_READ = "library:read"
    LIBRARY_UPDATE = "library:update"
    LIBRARY_DELETE = "library:delete"
    LIBRARY_LIST = "library:list"
    LIBRARY_MANAGE = "library:manage"

    LIBRARY_BOOK_ADD = "library_book:create"
    LIBRARY_BOOK_READ = "library_book:read"
    LIBRARY_BOOK_UPDATE = "library_book:update"
    LIBRARY_BOOK_REMOVE = "library_book:delete"
    LIBRARY_BOOK_LIST = "library_book:list"
    LIBRARY_BOOK_MANAGE = "library_book:manage"
    LIBRARY_BOOK_TRANSFER = "library_book:transfer"

    AUTHOR_CREATE = "author:create"
    AUTHOR_READ = "author:read"
    AUTHOR_UPDATE = "author:update"
    AUTHOR_DELETE = "author:delete"
    AUTHOR_LIST = "author:list"
    AUTHOR_SEARCH = "author:search"
    AUTHOR_MANAGE = "author:manage"

    PUBLISHER_CREATE = "publisher:create"
    PUBLISHER_READ = "publisher:read"
    PUBLISHER_UPDATE = "publisher:update"
    PUBLISHER_DELETE = "publisher:delete"
    PUBLISHER_LIST = "publisher:list"
    PUBLISHER_SEARCH = "publisher:search"
    PUBLISHER_MANAGE = "publisher:manage"

    ROLE_CREATE = "role:create"
    ROLE_READ = "role:read"
    ROLE_UPDATE = "role:update"
    ROLE_DELETE = "role:delete"
    ROLE_LIST = "role:list"
    ROLE_MANAGE = "role:manage"
    ROLE_ASSIGN = "role:assign"
    ROLE_REVOKE = "role:revoke"

    SYSTEM_CONFIG = "system:config"
    SYSTEM_MONITOR = "system:monitor"
    SYSTEM_BACKUP = "system:backup"
    SYSTEM_RESTORE = "system:restore"
    SYSTEM_MAINTAIN = "system:maintain"
    SYSTEM_MANAGE = "system:manage"

    AUDIT_LOG_READ = "audit_log:read"
    AUDIT_LOG_EXPORT = "audit_log:export"
    AUDIT_LOG_MANAGE = "audit_log:manage"
    SECURITY_MANAGE = "security:manage"
    SECURITY_MONITOR = "security:monitor"

    API_ACCESS = "api:access"
    API_ADMIN = "api:admin"
    INTEGRATION_MANAGE = "integration:manage"

    @classmethod
    def all(cls) -> List[str]:
        return [value for name, value in vars(cls).items() if name.isupper()]


ALL_PERMISSIONS: FrozenSet[str] = frozenset(Permission.all())

P = Permission

_READ_CATALOGUE = [
    P.BOOK_READ, P.BOOK_LIST, P.BOOK_SEARCH,
    P.AUTHOR_READ, P.AUTHOR_LIST, P.AUTHOR_SEARCH,
    P.PUBLISHER_READ, P.PUBLISHER_LIST, P.PUBLISHER_SEARCH,
]

_EDIT_CATALOGUE = [
    P.BOOK_CREATE, P.BOOK_READ, P.BOOK_UPDATE, P.BOOK_DELETE, P.BOOK_LIST, P.BOOK_SEARCH,
    P.BOOK_IMPORT, P.BOOK_EXPORT,
    P.AUTHOR_CREATE, P.AUTHOR_READ, P.AUTHOR_UPDATE, P.AUTHOR_DELETE, P.AUTHOR_LIST, P.AUTHOR_SEARCH,
    P.PUBLISHER_CREATE, P.PUBLISHER_READ, P.PUBLISHER_UPDATE, P.PUBLISHER_DELETE, P.PUBLISHER_LIST,
    P.PUBLISHER_SEARCH,
]

_RUN_LIBRARIES = [
    P.LIBRARY_CREATE, P.LIBRARY_READ, P.LIBRARY_UPDATE, P.LIBRARY_DELETE, P.LIBRARY_LIST,
    P.LIBRARY_BOOK_ADD, P.LIBRARY_BOOK_READ, P.LIBRARY_BOOK_UPDATE, P.LIBRARY_BOOK_REMOVE,
    P.LIBRARY_BOOK_LIST, P.LIBRARY_BOOK_TRANSFER,
]


@dataclass(frozen=True)
class RoleTemplate:
    name: str
    description: str
    permissions: List[str]


ROLE_TEMPLATES: Dict[str, RoleTemplate] = {
    "SUPER_ADMIN": RoleTemplate(
        "Super Administrator",
        "Full system access with all permissions",
        Permission.all(),
    ),
    "ADMIN": RoleTemplate(
        "Administrator",
        "Administrative access to most system functions",
        [
            P.USER_CREATE, P.USER_READ, P.USER_UPDATE, P.USER_DELETE, P.USER_LIST,
            P.USER_SUSPEND, P.USER_ACTIVATE,
            *_EDIT_CATALOGUE,
            P.BOOK_BULK_CREATE, P.BOOK_BULK_UPDATE, P.BOOK_BULK_DELETE,
            *_RUN_LIBRARIES,
            P.AUDIT_LOG_READ, P.AUDIT_LOG_EXPORT, P.SECURITY_MONITOR, P.API_ACCESS,
        ],
    ),
    "LIBRARIAN": RoleTemplate(
        "Librarian",
        "Manages library operations and book catalog",
        [P.USER_READ, P.USER_LIST, *_EDIT_CATALOGUE, *_RUN_LIBRARIES, P.AUDIT_LOG_READ, P.API_ACCESS],
    ),
    "CONTENT_MANAGER": RoleTemplate(
        "Content Manager",
        "Manages books, authors, and publishers",
        [
            P.USER_READ_OWN, P.USER_UPDATE_OWN,
            *_EDIT_CATALOGUE,
            P.LIBRARY_READ, P.LIBRARY_LIST, P.LIBRARY_BOOK_READ, P.LIBRARY_BOOK_LIST,
            P.API_ACCESS,
        ],
    ),
    "READER": RoleTemplate(
        "Reader",
        "Basic read access to library content",
        [
            P.USER_READ_OWN, P.USER_UPDATE_OWN,
            *_READ_CATALOGUE,
            P.LIBRARY_READ, P.LIBRARY_LIST, P.LIBRARY_BOOK_READ, P.LIBRARY_BOOK_LIST,
            P.API_ACCESS,
        ],
    ),
    "GUEST": RoleTemplate(
        "Guest",
        "Limited read-only access",
        [
            P.BOOK_READ, P.BOOK_LIST, P.BOOK_SEARCH,
            P.AUTHOR_READ, P.AUTHOR_SEARCH,
            P.PUBLISHER_READ, P.PUBLISHER_SEARCH,
            P.LIBRARY_READ, P.LIBRARY_LIST,
        ],
    ),
}


@dataclass(frozen=True)
class ParsedPermission:
    resource: str
    action: str
    scope: Optional[str] = None


def is_valid_permission(permission: str) -> bool:
    return permission in ALL_PERMISSIONS


def parse_permission(permission: str) -> Optional[ParsedPermission]:
    """Split 'resource:action[:scope]'; None when the string has the wrong shape"""
    parts = permission.split(":")
    if len(parts) < 2 or len(parts) > 3:
        return None
    return ParsedPermission(*parts)


def has_permission(granted: Iterable[str], required: str) -> bool:
    """Exact grant, '<resource>:manage' on the same resource, or system:manage"""
    granted = set(granted)
    if required in granted:
        return True
    parsed = parse_permission(required)
    if parsed is None:
        return False
    return f"{parsed.resource}:{ActionType.MANAGE.value}" in granted or P.SYSTEM_MANAGE in granted


def has_any_permission(granted: Iterable[str], required: Iterable[str]) -> bool:
    granted = set(granted)
    return any(has_permission(granted, permission) for permission in required)


def has_all_permissions(granted: Iterable[str], required: Iterable[str]) -> bool:
    granted = set(granted)
    return all(has_permission(granted, permission) for permission in required)
