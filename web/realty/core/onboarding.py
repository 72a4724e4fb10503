"""Role selection and onboarding rules.

Profile completion is derived: it mirrors the onboarding flag of whichever
role is currently primary and is recomputed after every change to the primary
role or to the onboarding flags.
"""

from typing import Any, Dict, List

from ..roles import Role, SELF_SERVICE_ROLES, VerificationStatus
from .exceptions import ValidationError

# Roles with an onboarding questionnaire; agents onboard through verification
ONBOARDING_ROLES = frozenset({Role.buyer.value, Role.seller.value})

TRACKED_ROLES = (Role.buyer.value, Role.seller.value, Role.agent.value)


def validate_selectable_role(role: str) -> str:
    if role not in SELF_SERVICE_ROLES:
        raise ValidationError(
            f"Invalid role. Must be one of: {', '.join(sorted(SELF_SERVICE_ROLES))}", field="role"
        )
    return role


def validate_onboarding_role(role: str) -> str:
    if role not in ONBOARDING_ROLES:
        raise ValidationError(
            f"Invalid onboarding role. Must be one of: {', '.join(sorted(ONBOARDING_ROLES))}",
            field="role",
        )
    return role


def derive_profile_complete(primary_role: str, onboarding_completed: Dict[str, bool]) -> bool:
    return bool((onboarding_completed or {}).get(primary_role, False))


def refresh_profile_complete(user: Any) -> bool:
    """Recompute ``is_profile_complete`` on *user* and return it."""
    user.is_profile_complete = derive_profile_complete(user.role, user.onboarding_completed)
    return user.is_profile_complete


def mark_onboarded(onboarding_completed: Dict[str, bool], role: str) -> Dict[str, bool]:
    """Return a new flag map with *role* completed; the input is not mutated."""
    flags = {r: False for r in TRACKED_ROLES}
    flags.update(onboarding_completed or {})
    flags[role] = True
    return flags


def with_additional_role(additional_roles: List[str], role: str) -> List[str]:
    """Set-semantics append: the same role twice leaves the list unchanged."""
    current = list(additional_roles or [])
    if role not in current:
        current.append(role)
    return current


def next_steps(user: Any) -> List[str]:
    steps = []
    if not derive_profile_complete(user.role, user.onboarding_completed) and user.role in TRACKED_ROLES:
        steps.append(f"complete_{user.role}_onboarding")
    if user.role == Role.agent.value:
        status = user.agent_verification_status
        if status == VerificationStatus.none.value:
            steps.append("submit_agent_application")
        elif status == VerificationStatus.pending.value:
            steps.append("await_agent_verification")
        elif status == VerificationStatus.rejected.value:
            steps.append("resubmit_agent_application")
    return steps
