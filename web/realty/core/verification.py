"""Agent verification state machine.

    none     --apply-->   pending
    rejected --apply-->   pending
    pending  --approve--> verified
    pending  --reject-->  rejected
    verified --approve--> verified   (repeat write)
    rejected --reject-->  rejected   (repeat write)

Any other pair is a conflict.
"""

from enum import Enum
from typing import Dict, Tuple

from ..roles import VerificationStatus as Status
from .exceptions import ConflictError, ValidationError


class VerificationAction(str, Enum):
    apply = "apply"
    approve = "approve"
    reject = "reject"


TRANSITIONS: Dict[Tuple[str, str], str] = {
    (Status.none.value, VerificationAction.apply.value): Status.pending.value,
    (Status.rejected.value, VerificationAction.apply.value): Status.pending.value,
    (Status.pending.value, VerificationAction.approve.value): Status.verified.value,
    (Status.pending.value, VerificationAction.reject.value): Status.rejected.value,
    (Status.verified.value, VerificationAction.approve.value): Status.verified.value,
    (Status.rejected.value, VerificationAction.reject.value): Status.rejected.value,
}


def parse_decision(action: str) -> VerificationAction:
    """Admin decisions are approve or reject; apply is reserved for the applicant."""
    if action not in (VerificationAction.approve.value, VerificationAction.reject.value):
        raise ValidationError("Action must be approve or reject", field="action")
    return VerificationAction(action)


def next_status(current: str, action: VerificationAction) -> str:
    """Return the status reached from *current* via *action* or raise ConflictError."""
    try:
        return TRANSITIONS[(current or Status.none.value, action.value)]
    except KeyError:
        raise ConflictError(
            f"Cannot {action.value} an agent whose verification status is {current}",
            entity="AgentProfile",
        ) from None
