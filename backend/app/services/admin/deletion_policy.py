"""Rules guarding admin removal and superadmin demotion.

At least one superadmin must always exist, and nobody may delete their own
account. The superadmin count is read by the caller just before the
decision; two concurrent requests can both see a count of 2 and both
proceed. That gap is accepted for this single-writer deployment.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from backend.app.services.auth.principal import Principal
from backend.app.services.auth.roles import Role


class DenialReason(str, Enum):
    SELF_DELETION = "self_deletion"
    LAST_SUPERADMIN = "last_superadmin"


DENIAL_MESSAGES = {
    DenialReason.SELF_DELETION: "You cannot delete your own account",
    DenialReason.LAST_SUPERADMIN: "Cannot delete the last superadmin",
}


@dataclass(frozen=True)
class DeletionDecision:
    allowed: bool
    reason: Optional[DenialReason] = None

    @property
    def message(self) -> Optional[str]:
        return DENIAL_MESSAGES.get(self.reason) if self.reason else None


ALLOW = DeletionDecision(allowed=True)


def _is_superadmin(target: Mapping[str, Any]) -> bool:
    return target.get("role") == Role.SUPERADMIN.value


def can_delete(requester: Principal, target: Mapping[str, Any], superadmin_count: int) -> DeletionDecision:
    if str(requester.id) == str(target.get("_id")):
        return DeletionDecision(allowed=False, reason=DenialReason.SELF_DELETION)
    if _is_superadmin(target) and superadmin_count <= 1:
        return DeletionDecision(allowed=False, reason=DenialReason.LAST_SUPERADMIN)
    return ALLOW


def can_change_role(target: Mapping[str, Any], new_role: Role, superadmin_count: int) -> bool:
    """False when the update would demote the only remaining superadmin."""
    if not _is_superadmin(target) or new_role is Role.SUPERADMIN:
        return True
    return superadmin_count > 1
