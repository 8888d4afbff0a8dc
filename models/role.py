"""
Roles and the authorities they grant.

A role's authorities are its permissions followed by ROLE_<NAME>, e.g.
MANAGER -> ["management:create", ..., "ROLE_MANAGER"].
"""
from __future__ import annotations

import enum
from typing import List


class Permission(str, enum.Enum):
    ADMIN_READ = "admin:read"
    ADMIN_UPDATE = "admin:update"
    ADMIN_CREATE = "admin:create"
    ADMIN_DELETE = "admin:delete"
    MANAGER_READ = "management:read"
    MANAGER_UPDATE = "management:update"
    MANAGER_CREATE = "management:create"
    MANAGER_DELETE = "management:delete"


_MANAGEMENT = {
    Permission.MANAGER_READ,
    Permission.MANAGER_UPDATE,
    Permission.MANAGER_CREATE,
    Permission.MANAGER_DELETE,
}


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"

    @property
    def permissions(self) -> frozenset:
        return ROLE_PERMISSIONS[self]

    @property
    def authorities(self) -> List[str]:
        granted = sorted(p.value for p in self.permissions)
        granted.append(f"ROLE_{self.name}")
        return granted

    @classmethod
    def parse(cls, value) -> "Role":
        if isinstance(value, cls):
            return value
        return cls[str(value).strip().upper()]


ROLE_PERMISSIONS = {
    Role.USER: frozenset(),
    Role.MANAGER: frozenset(_MANAGEMENT),
    Role.ADMIN: frozenset(
        {
            Permission.ADMIN_READ,
            Permission.ADMIN_UPDATE,
            Permission.ADMIN_CREATE,
            Permission.ADMIN_DELETE,
        }
        | _MANAGEMENT
    ),
}
