"""Role selection, additional roles and onboarding completion."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..core.base import BaseService
from ..core.config import get_settings
from ..core.exceptions import NotFoundError
from ..core.onboarding import (
    validate_selectable_role,
    validate_onboarding_role,
    refresh_profile_complete,
    mark_onboarded,
    with_additional_role,
    next_steps,
)
from ..core.permissions import Action, Actor, Target, authorize
from ..models import User
from ..roles import Role, VerificationStatus

logger = logging.getLogger(__name__)

INITIAL_SEARCH_NAME = "My Initial Search"


class OnboardingService(BaseService):
    """Self-service role lifecycle of an account"""

    async def _load(self, user_id: int) -> User:
        user = await self.uow.users.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def select_role(self, actor: Actor, target_id: int, role: str) -> Dict[str, Any]:
        """Set the primary role of the actor's own account.

        Choosing ``agent`` resets verification to ``none`` unless an agent
        profile already exists; the profile itself is only created by an
        application.
        """
        authorize(actor, Action.SELECT_ROLE, Target.for_user(target_id))
        validate_selectable_role(role)

        async with self.uow:
            user = await self._load(target_id)
            previous = user.role
            user.role = role
            if role == Role.agent.value and user.agent_profile_id is None:
                user.agent_verification_status = VerificationStatus.none.value
            refresh_profile_complete(user)
            await self.uow.commit()

        logger.info("User %s switched primary role %s -> %s", user.id, previous, role)
        return {
            "role": user.role,
            "is_profile_complete": user.is_profile_complete,
            "next_stage": f"onboarding_{role}",
        }

    async def complete_onboarding(
        self, actor: Actor, target_id: int, role: str, data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Record buyer or seller onboarding and apply its side effects.

        Buyer answers replace the search preferences and seed a first saved
        search when property types or locations are given. Seller answers are
        kept under ``preferences["seller_data"]`` when the seller has a property.
        """
        authorize(actor, Action.COMPLETE_ONBOARDING, Target.for_user(target_id))
        validate_onboarding_role(role)
        data = data or {}

        async with self.uow:
            user = await self._load(target_id)
            seeded_search_id = None

            if role == Role.buyer.value:
                seeded_search_id = await self._apply_buyer_data(user, data)
            else:
                self._apply_seller_data(user, data)

            user.onboarding_completed = mark_onboarded(user.onboarding_completed, role)
            refresh_profile_complete(user)
            await self.uow.commit()

        logger.info("User %s completed %s onboarding", user.id, role)
        return {
            "onboarding_completed": dict(user.onboarding_completed),
            "is_profile_complete": user.is_profile_complete,
            "saved_search_id": seeded_search_id,
            "next_stage": f"dashboard_{user.role}",
        }

    async def _apply_buyer_data(self, user: User, data: Dict[str, Any]) -> Optional[int]:
        property_types = list(data.get("property_types") or [])
        locations = list(data.get("locations") or [])
        price_range = data.get("price_range") or {"min": 0, "max": 1000000}
        notifications = data.get("notifications")
        if notifications is None:
            notifications = {"email": True, "sms": False, "push": True}

        preferences = dict(user.preferences or {})
        preferences.update({
            "property_types": property_types,
            "price_range": dict(price_range),
            "locations": locations,
            "notifications": dict(notifications),
        })
        user.preferences = preferences

        if not (property_types or locations):
            return None

        count = await self.uow.saved_searches.count_for_user(user.id)
        if count >= get_settings().MAX_SAVED_SEARCHES:
            logger.info("User %s at saved search capacity; initial search not created", user.id)
            return None

        filters = {
            "property_types": property_types,
            "locations": locations,
            "min_price": price_range.get("min"),
            "max_price": price_range.get("max"),
        }
        for key in ("bedrooms", "bathrooms"):
            if data.get(key) is not None:
                filters[key] = data[key]

        search = await self.uow.saved_searches.create(obj_in={
            "user_id": user.id,
            "name": INITIAL_SEARCH_NAME,
            "filters": filters,
            "email_alerts": bool(data.get("email_alerts", False)),
            "frequency": "weekly",
        })
        return search.id

    def _apply_seller_data(self, user: User, data: Dict[str, Any]) -> None:
        if not data.get("has_property"):
            return
        preferences = dict(user.preferences or {})
        preferences["seller_data"] = {
            "has_property": True,
            "property_type": data.get("property_type"),
            "estimated_value": data.get("estimated_value"),
            "plan_to_sell": data.get("plan_to_sell"),
            "property_address": data.get("property_address"),
        }
        user.preferences = preferences

    async def add_role(self, actor: Actor, target_id: int, role: str) -> Dict[str, Any]:
        """Add a secondary role; adding one already held changes nothing."""
        authorize(actor, Action.ADD_ROLE, Target.for_user(target_id))
        validate_selectable_role(role)

        async with self.uow:
            user = await self._load(target_id)
            roles = with_additional_role(user.additional_roles, role)
            if roles != list(user.additional_roles or []):
                user.additional_roles = roles
                await self.uow.commit()
                logger.info("User %s added role %s", user.id, role)

        return {"role": user.role, "additional_roles": list(user.additional_roles or [])}

    async def get_status(self, actor: Actor, target_id: int) -> Dict[str, Any]:
        authorize(actor, Action.VIEW_ONBOARDING, Target.for_user(target_id))
        user = await self._load(target_id)
        return {
            "is_complete": user.is_profile_complete,
            "role": user.role,
            "additional_roles": list(user.additional_roles or []),
            "onboarding_completed": dict(user.onboarding_completed or {}),
            "agent_verification_status": user.agent_verification_status,
            "next_steps": next_steps(user),
        }
