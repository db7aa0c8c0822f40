"""Roles, permission records and the company ceiling.

A ``Permissions`` value is a fixed five-flag record. Company memberships carry
one (the company ceiling) and so do job assignments; whatever a job grants is
always ANDed with the ceiling before it is enforced.
"""
from dataclasses import dataclass, fields, replace, asdict
from enum import Enum
from typing import Any, Mapping, Optional


class Role(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    USER = "USER"
    SUPPORT = "SUPPORT"

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        """Return the role for ``value`` or None when it is not a known role."""
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


# Company roles that are never restricted by specialty for job visibility
MANAGER_ROLES = (Role.OWNER, Role.ADMIN)


@dataclass(frozen=True)
class Permissions:
    can_manage_users: bool = False
    can_view_all_specialties: bool = False
    can_view_prices: bool = False
    can_edit_prices: bool = False
    can_audit: bool = False

    @classmethod
    def flag_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Permissions":
        """Build from a loose mapping; absent flags are false, unknown keys ignored."""
        if not data:
            return cls()
        return cls(**{name: bool(data.get(name, False)) for name in cls.flag_names()})

    @classmethod
    def from_row(cls, row: Any) -> "Permissions":
        """Read the five flag columns off an ORM row (membership or assignment)."""
        if row is None:
            return cls()
        return cls(**{name: bool(getattr(row, name, False)) for name in cls.flag_names()})

    def merge(self, **updates: Optional[bool]) -> "Permissions":
        """Partial update. Unknown flag names raise TypeError; None leaves a flag as is."""
        unknown = set(updates) - set(self.flag_names())
        if unknown:
            raise TypeError(f"Unknown permission flags: {', '.join(sorted(unknown))}")
        return replace(self, **{k: bool(v) for k, v in updates.items() if v is not None})

    def apply_to(self, row: Any) -> None:
        for name in self.flag_names():
            setattr(row, name, getattr(self, name))

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


NO_PERMISSIONS = Permissions()
ALL_PERMISSIONS = Permissions(
    can_manage_users=True,
    can_view_all_specialties=True,
    can_view_prices=True,
    can_edit_prices=True,
    can_audit=True,
)
DEFAULT_EMPLOYEE_PERMISSIONS = NO_PERMISSIONS
OWNER_PERMISSIONS = ALL_PERMISSIONS


def cap_permissions(job: Optional[Permissions], company: Optional[Permissions]) -> Permissions:
    """Effective permissions: each flag is granted only if both sides grant it."""
    job = job or NO_PERMISSIONS
    company = company or NO_PERMISSIONS
    return Permissions(**{
        name: getattr(job, name) and getattr(company, name)
        for name in Permissions.flag_names()
    })


def company_ceiling(role: Optional[Role], stored: Optional[Permissions]) -> Permissions:
    if role is Role.OWNER:
        return OWNER_PERMISSIONS
    if role is Role.ADMIN or role is Role.USER:
        return stored or NO_PERMISSIONS
    # SUPPORT and unknown roles
    return NO_PERMISSIONS


def can_manage_users(role: Optional[Role], ceiling: Permissions) -> bool:
    return role in MANAGER_ROLES or ceiling.can_manage_users


def is_support_admin(username: Optional[str], global_role: Optional[str], extra_usernames: tuple[str, ...] | list[str] = ()) -> bool:
    if global_role in ("support_admin", "super_admin"):
        return True
    return bool(username) and username.lower() in extra_usernames


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller for a single request, resolved by the API layer."""
    user_id: int
    company_id: int
    role: Role
    username: str = ""
    global_role: str = "user"

    @property
    def is_manager(self) -> bool:
        return self.role in MANAGER_ROLES
