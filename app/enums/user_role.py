from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SUPPORT = "support"
    USER = "user"


STAFF_ROLES = (UserRole.ADMIN, UserRole.MANAGER, UserRole.SUPPORT)
