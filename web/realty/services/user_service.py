"""Account self-service: profile, favorites, saved searches, preferences."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import phonenumbers

from ..core.base import BaseService
from ..core.config import get_settings
from ..core.exceptions import NotFoundError, ValidationError
from ..core.onboarding import refresh_profile_complete
from ..core.permissions import Action, Actor, Target, USER_FIELDS, authorize, check_fields
from ..models import Property, SavedSearch, User
from ..roles import Role

logger = logging.getLogger(__name__)

# Manager is reachable only through office promotion
ADMIN_ASSIGNABLE_ROLES = frozenset({Role.buyer.value, Role.seller.value, Role.agent.value, Role.admin.value})

PREFERENCE_KEYS = ("property_types", "price_range", "locations", "notifications")

SEARCH_FREQUENCIES = frozenset({"daily", "weekly", "monthly"})


def validate_phone_number(phone_number: Optional[str]) -> Optional[str]:
    """Validate and format an international phone number.

    Args:
        phone_number: Phone number to validate

    Returns:
        Formatted E.164 phone number, or None for an empty value

    Raises:
        ValidationError: If the phone number is invalid
    """
    if not phone_number or phone_number.strip() == "":
        return None

    try:
        parsed = phonenumbers.parse(phone_number, None)
    except phonenumbers.NumberParseException:
        raise ValidationError(
            "Invalid phone number format. Please include country code (e.g. +1 for US).",
            field="phone",
        ) from None

    if not phonenumbers.is_valid_number(parsed):
        raise ValidationError("Invalid phone number format", field="phone")

    # Format to E.164 standard (e.g. +12125551234)
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


class UserService(BaseService):
    """Account profile and personal collections"""

    async def _load(self, user_id: int) -> User:
        user = await self.uow.users.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def get_user(self, actor: Actor, user_id: int) -> Dict[str, Any]:
        authorize(actor, Action.VIEW_USER, Target.for_user(user_id))
        user = await self._load(user_id)
        return {
            "user": user,
            "stats": {
                "favorites_count": await self.uow.users.count_favorites(user.id),
                "saved_searches_count": await self.uow.saved_searches.count_for_user(user.id),
            },
        }

    async def update_user(self, actor: Actor, user_id: int, changes: Dict[str, Any]) -> User:
        """Update the fields the actor's role may touch.

        A role change recomputes profile completion.
        """
        authorize(actor, Action.UPDATE_USER, Target.for_user(user_id))
        check_fields(USER_FIELDS, actor.role, changes)
        changes = dict(changes)

        if "phone" in changes:
            changes["phone"] = validate_phone_number(changes["phone"])
        if "role" in changes and changes["role"] not in ADMIN_ASSIGNABLE_ROLES:
            raise ValidationError(f"Role {changes['role']} cannot be assigned directly", field="role")
        for name in ("first_name", "last_name"):
            if name in changes and not (changes[name] or "").strip():
                raise ValidationError(f"{name} must not be empty", field=name)

        async with self.uow:
            user = await self._load(user_id)
            if "preferences" in changes:
                preferences = dict(user.preferences or {})
                preferences.update(changes["preferences"] or {})
                changes["preferences"] = preferences
            user = await self.uow.users.update(id=user.id, obj_in=changes)
            if "role" in changes:
                refresh_profile_complete(user)
                logger.info("Admin %s set role of user %s to %s", actor.id, user.id, user.role)
            await self.uow.commit()
        return user

    async def deactivate_user(self, actor: Actor, user_id: int) -> User:
        authorize(actor, Action.DEACTIVATE_USER, Target.for_user(user_id))
        async with self.uow:
            user = await self._load(user_id)
            user = await self.uow.users.update(id=user.id, obj_in={"is_active": False})
            await self.uow.commit()
        logger.info("User %s deactivated by %s", user_id, actor.id)
        return user

    async def get_activity(self, actor: Actor, user_id: int) -> Dict[str, Any]:
        authorize(actor, Action.VIEW_ACTIVITY, Target.for_user(user_id))
        user = await self._load(user_id)
        searches = await self.uow.saved_searches.list_for_user(user.id)
        return {
            "last_login": user.last_login,
            "member_since": user.created_at,
            "favorites_count": await self.uow.users.count_favorites(user.id),
            "saved_searches_count": len(searches),
            "recent_searches": [s.name for s in searches[-5:]],
        }

    # ---- favorites ----
    async def list_favorites(self, actor: Actor, user_id: int) -> List[Property]:
        authorize(actor, Action.MANAGE_FAVORITES, Target.for_user(user_id))
        ids = await self.uow.users.list_favorite_ids(user_id)
        by_id = {p.id: p for p in await self.uow.properties.get_many(ids)}
        return [by_id[i] for i in ids if i in by_id]

    async def add_favorite(self, actor: Actor, user_id: int, property_id: int) -> List[int]:
        """Idempotent: favoriting a property twice keeps one entry."""
        authorize(actor, Action.MANAGE_FAVORITES, Target.for_user(user_id))
        async with self.uow:
            await self._load(user_id)
            if not await self.uow.properties.get(property_id):
                raise NotFoundError("Property", property_id)
            if not await self.uow.users.get_favorite(user_id, property_id):
                await self.uow.users.add_favorite(user_id, property_id)
                await self.uow.commit()
        return await self.uow.users.list_favorite_ids(user_id)

    async def remove_favorite(self, actor: Actor, user_id: int, property_id: int) -> List[int]:
        authorize(actor, Action.MANAGE_FAVORITES, Target.for_user(user_id))
        async with self.uow:
            favorite = await self.uow.users.get_favorite(user_id, property_id)
            if favorite:
                await self.uow.users.remove_favorite(favorite)
                await self.uow.commit()
        return await self.uow.users.list_favorite_ids(user_id)

    # ---- saved searches ----
    async def _load_search(self, user_id: int, search_id: int) -> SavedSearch:
        search = await self.uow.saved_searches.get(search_id)
        if not search or search.user_id != user_id:
            raise NotFoundError("SavedSearch", search_id)
        return search

    async def list_saved_searches(self, actor: Actor, user_id: int) -> List[SavedSearch]:
        authorize(actor, Action.MANAGE_SAVED_SEARCHES, Target.for_user(user_id))
        return await self.uow.saved_searches.list_for_user(user_id)

    async def add_saved_search(self, actor: Actor, user_id: int, data: Dict[str, Any]) -> SavedSearch:
        authorize(actor, Action.MANAGE_SAVED_SEARCHES, Target.for_user(user_id))
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Search name is required", field="name")
        frequency = data.get("frequency") or "weekly"
        if frequency not in SEARCH_FREQUENCIES:
            raise ValidationError(f"Invalid frequency {frequency}", field="frequency")

        limit = get_settings().MAX_SAVED_SEARCHES
        async with self.uow:
            await self._load(user_id)
            if await self.uow.saved_searches.count_for_user(user_id) >= limit:
                raise ValidationError(f"Maximum {limit} saved searches allowed")
            search = await self.uow.saved_searches.create(obj_in={
                "user_id": user_id,
                "name": name,
                "filters": dict(data.get("filters") or {}),
                "email_alerts": bool(data.get("email_alerts", True)),
                "frequency": frequency,
            })
            await self.uow.commit()
        return search

    async def update_saved_search(
        self, actor: Actor, user_id: int, search_id: int, changes: Dict[str, Any]
    ) -> SavedSearch:
        """Partial update; new filters are merged into the existing ones."""
        authorize(actor, Action.MANAGE_SAVED_SEARCHES, Target.for_user(user_id))
        async with self.uow:
            search = await self._load_search(user_id, search_id)
            patch: Dict[str, Any] = {}
            if changes.get("name") is not None:
                if not changes["name"].strip():
                    raise ValidationError("Search name is required", field="name")
                patch["name"] = changes["name"].strip()
            if changes.get("filters") is not None:
                patch["filters"] = {**(search.filters or {}), **changes["filters"]}
            if changes.get("email_alerts") is not None:
                patch["email_alerts"] = bool(changes["email_alerts"])
            if changes.get("frequency") is not None:
                if changes["frequency"] not in SEARCH_FREQUENCIES:
                    raise ValidationError(f"Invalid frequency {changes['frequency']}", field="frequency")
                patch["frequency"] = changes["frequency"]
            search = await self.uow.saved_searches.update(id=search.id, obj_in=patch)
            await self.uow.commit()
        return search

    async def delete_saved_search(self, actor: Actor, user_id: int, search_id: int) -> None:
        authorize(actor, Action.MANAGE_SAVED_SEARCHES, Target.for_user(user_id))
        async with self.uow:
            search = await self._load_search(user_id, search_id)
            await self.uow.saved_searches.delete(id=search.id)
            await self.uow.commit()

    async def update_preferences(self, actor: Actor, user_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        authorize(actor, Action.UPDATE_PREFERENCES, Target.for_user(user_id))
        patch = {k: changes[k] for k in PREFERENCE_KEYS if changes.get(k) is not None}
        if not patch:
            raise ValidationError("No preference updates provided")

        async with self.uow:
            user = await self._load(user_id)
            preferences = dict(user.preferences or {})
            preferences.update(patch)
            user = await self.uow.users.update(id=user.id, obj_in={"preferences": preferences})
            await self.uow.commit()
        return user.preferences
