"""Authorization policy engine.

``can_act`` is a pure function of an :class:`Actor` snapshot, an
:class:`Action` and an optional :class:`Target`. Every rule is an independent
predicate; an action is allowed when any rule matches. Nothing here is cached:
callers build the actor from the account row loaded for the current request.

Rules:

* admin      - any action that is not self-only
* self       - profile-scoped actions on the actor's own account
* manager    - office and property actions inside the manager's office
* agent      - property actions on listings the agent holds
* role grant - targetless actions gated by a static role table

Inactive actors match no rule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional

from ..roles import Role
from .exceptions import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


class Action(str, Enum):
    # self-only: nobody, admins included, may do these for another account
    CHANGE_PASSWORD = "change_password"
    SELECT_ROLE = "select_role"
    COMPLETE_ONBOARDING = "complete_onboarding"
    ADD_ROLE = "add_role"
    VIEW_ONBOARDING = "view_onboarding"
    MANAGE_FAVORITES = "manage_favorites"
    MANAGE_SAVED_SEARCHES = "manage_saved_searches"
    UPDATE_PREFERENCES = "update_preferences"

    # account-scoped: self or admin
    VIEW_USER = "view_user"
    UPDATE_USER = "update_user"
    DEACTIVATE_USER = "deactivate_user"
    VIEW_ACTIVITY = "view_activity"

    # office-scoped
    UPDATE_OFFICE = "update_office"
    DELETE_OFFICE = "delete_office"

    # property-scoped
    UPDATE_PROPERTY = "update_property"
    DELETE_PROPERTY = "delete_property"

    # targetless, granted by role
    APPLY_AGENT = "apply_agent"
    APPLY_MANAGER = "apply_manager"
    VERIFY_AGENT = "verify_agent"
    LIST_PENDING_AGENTS = "list_pending_agents"
    CREATE_OFFICE = "create_office"
    CREATE_PROPERTY = "create_property"
    SUBMIT_PROPERTY = "submit_property"
    ASSIGN_PROPERTY = "assign_property"


SELF_ONLY_ACTIONS: FrozenSet[Action] = frozenset({
    Action.CHANGE_PASSWORD,
    Action.SELECT_ROLE,
    Action.COMPLETE_ONBOARDING,
    Action.ADD_ROLE,
    Action.VIEW_ONBOARDING,
    Action.MANAGE_FAVORITES,
    Action.MANAGE_SAVED_SEARCHES,
    Action.UPDATE_PREFERENCES,
})

PROFILE_ACTIONS: FrozenSet[Action] = SELF_ONLY_ACTIONS | frozenset({
    Action.VIEW_USER,
    Action.UPDATE_USER,
    Action.DEACTIVATE_USER,
    Action.VIEW_ACTIVITY,
})

OFFICE_ACTIONS: FrozenSet[Action] = frozenset({Action.UPDATE_OFFICE, Action.DELETE_OFFICE})

PROPERTY_ACTIONS: FrozenSet[Action] = frozenset({Action.UPDATE_PROPERTY, Action.DELETE_PROPERTY})

_ALL_ROLES = frozenset(r.value for r in Role)

ROLE_GRANTS: Dict[Action, FrozenSet[str]] = {
    Action.APPLY_AGENT: _ALL_ROLES,
    Action.APPLY_MANAGER: _ALL_ROLES,
    Action.VERIFY_AGENT: frozenset({Role.admin.value}),
    Action.LIST_PENDING_AGENTS: frozenset({Role.admin.value}),
    Action.CREATE_OFFICE: frozenset({Role.admin.value, Role.manager.value}),
    Action.ASSIGN_PROPERTY: frozenset({Role.admin.value, Role.manager.value}),
    Action.CREATE_PROPERTY: frozenset({Role.admin.value, Role.manager.value, Role.agent.value}),
    Action.SUBMIT_PROPERTY: frozenset({Role.seller.value}),
}


@dataclass(frozen=True)
class Actor:
    """Snapshot of the acting account, taken for one request."""

    id: int
    role: str
    office_id: Optional[int] = None
    agent_profile_id: Optional[int] = None
    verification_status: str = "none"
    is_active: bool = True

    @classmethod
    def from_user(cls, user: Any) -> "Actor":
        return cls(
            id=user.id,
            role=user.role,
            office_id=user.office_id,
            agent_profile_id=user.agent_profile_id,
            verification_status=user.agent_verification_status,
            is_active=user.is_active,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin.value


@dataclass(frozen=True)
class Target:
    """The entity an action is aimed at, reduced to its ownership facts."""

    owner_id: Optional[int] = None
    office_id: Optional[int] = None
    listing_agent_id: Optional[int] = None

    @classmethod
    def for_user(cls, user_id: int) -> "Target":
        return cls(owner_id=user_id)

    @classmethod
    def for_office(cls, office: Any) -> "Target":
        return cls(office_id=office.id)

    @classmethod
    def for_property(cls, prop: Any) -> "Target":
        return cls(
            owner_id=prop.seller_id,
            office_id=prop.listing_office_id,
            listing_agent_id=prop.listing_agent_id,
        )


# ---------------------------------------------------------------------------
#  Rule predicates
# ---------------------------------------------------------------------------

def _admin_rule(actor: Actor, action: Action, target: Optional[Target]) -> bool:
    return actor.is_admin and action not in SELF_ONLY_ACTIONS


def _self_rule(actor: Actor, action: Action, target: Optional[Target]) -> bool:
    return (
        action in PROFILE_ACTIONS
        and target is not None
        and target.owner_id is not None
        and target.owner_id == actor.id
    )


def _manager_rule(actor: Actor, action: Action, target: Optional[Target]) -> bool:
    return (
        action in (OFFICE_ACTIONS | PROPERTY_ACTIONS)
        and actor.role == Role.manager.value
        and actor.office_id is not None
        and target is not None
        and target.office_id == actor.office_id
    )


def _agent_rule(actor: Actor, action: Action, target: Optional[Target]) -> bool:
    return (
        action in PROPERTY_ACTIONS
        and actor.role == Role.agent.value
        and actor.agent_profile_id is not None
        and target is not None
        and target.listing_agent_id == actor.agent_profile_id
    )


def _role_grant_rule(actor: Actor, action: Action, target: Optional[Target]) -> bool:
    return actor.role in ROLE_GRANTS.get(action, frozenset())


RULES: List[tuple[str, Callable[[Actor, Action, Optional[Target]], bool]]] = [
    ("admin", _admin_rule),
    ("self", _self_rule),
    ("manager", _manager_rule),
    ("agent", _agent_rule),
    ("role_grant", _role_grant_rule),
]


def matching_rules(actor: Actor, action: Action, target: Optional[Target] = None) -> List[str]:
    """Names of every rule that allows *action*; empty means deny."""
    if not actor.is_active:
        return []
    return [name for name, rule in RULES if rule(actor, action, target)]


def can_act(actor: Actor, action: Action, target: Optional[Target] = None) -> bool:
    return bool(matching_rules(actor, action, target))


def authorize(actor: Actor, action: Action, target: Optional[Target] = None) -> None:
    """Raise :class:`AuthorizationError` unless *actor* may perform *action*."""
    if not can_act(actor, action, target):
        logger.info(
            "Denied %s for user %s (role=%s) on %s", action.value, actor.id, actor.role, target
        )
        raise AuthorizationError(f"Not authorized to {action.value.replace('_', ' ')}", action=action.value)


# ---------------------------------------------------------------------------
#  Per-role mutable field tables
# ---------------------------------------------------------------------------

_USER_BASE = frozenset({"first_name", "last_name", "phone", "preferences"})

USER_FIELDS: Dict[str, FrozenSet[str]] = {
    Role.buyer.value: _USER_BASE,
    Role.seller.value: _USER_BASE,
    Role.agent.value: _USER_BASE,
    Role.manager.value: _USER_BASE,
    Role.admin.value: _USER_BASE | {"role", "is_active"},
}

_OFFICE_MANAGER = frozenset({
    "name", "description", "address", "phone", "email", "website",
    "specialties", "services", "languages", "office_hours", "social_media",
    "settings", "market_areas", "manager_id",
})

OFFICE_FIELDS: Dict[str, FrozenSet[str]] = {
    Role.manager.value: _OFFICE_MANAGER,
    Role.admin.value: _OFFICE_MANAGER | {"franchise_id", "is_premium"},
}

_PROPERTY_AGENT = frozenset({
    "title", "description", "price", "status", "bedrooms", "bathrooms",
    "square_footage", "lot_size", "year_built", "address", "images",
    "amenities", "features", "virtual_tour",
})

PROPERTY_FIELDS: Dict[str, FrozenSet[str]] = {
    Role.agent.value: _PROPERTY_AGENT,
    Role.manager.value: _PROPERTY_AGENT | {"property_type", "mls_number"},
    Role.admin.value: _PROPERTY_AGENT | {"property_type", "mls_number", "listing_agent_id", "listing_office_id"},
}


def allowed_fields(table: Mapping[str, FrozenSet[str]], role: str) -> FrozenSet[str]:
    return table.get(role, frozenset())


def check_fields(table: Mapping[str, FrozenSet[str]], role: str, fields: Iterable[str]) -> None:
    """Reject any field *role* may not change; runs before anything is merged."""
    permitted = allowed_fields(table, role)
    rejected = sorted(set(fields) - permitted)
    if rejected:
        raise ValidationError(
            f"Fields not updatable by role {role}: {', '.join(rejected)}",
            field=rejected[0],
        )
