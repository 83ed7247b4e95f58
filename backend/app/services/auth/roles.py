"""Admin roles and the role gate used by protected routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

if TYPE_CHECKING:
    from backend.app.services.auth.principal import Principal


class Role(str, Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    MODERATOR = "moderator"

    @classmethod
    def parse(cls, value: object) -> "Role":
        """Return the role named by ``value``; raise ValueError for anything else."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for role in cls:
                if role.value == value:
                    return role
        raise ValueError(f"Unknown role: {value!r}")

    @classmethod
    def values(cls) -> Tuple[str, ...]:
        return tuple(role.value for role in cls)


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    allowed_roles: Tuple[Role, ...] = field(default_factory=tuple)

    @property
    def details(self) -> Optional[str]:
        if self.allowed:
            return None
        names = ", ".join(role.value for role in self.allowed_roles)
        return f"Requires one of the following roles: {names}"


def authorize(principal: Optional["Principal"], allowed_roles: Iterable[Role]) -> AccessDecision:
    """Allow only a principal whose role is one of ``allowed_roles``."""
    roles = tuple(allowed_roles)
    if principal is None or principal.role not in roles:
        return AccessDecision(allowed=False, allowed_roles=roles)
    return AccessDecision(allowed=True, allowed_roles=roles)
