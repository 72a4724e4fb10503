"""Listing lifecycle: staff-created listings, seller submissions, assignment
to an agent and office, scoped updates and soft deletion."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.base import BaseService
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import (
    Action, Actor, Target, PROPERTY_FIELDS, authorize, check_fields,
)
from ..models import Property
from ..roles import Role, PropertyStatus, PropertyType, VerificationStatus

logger = logging.getLogger(__name__)

LISTING_FIELDS = frozenset({
    "mls_number", "title", "description", "price", "property_type",
    "bedrooms", "bathrooms", "square_footage", "lot_size", "year_built",
    "address", "images", "amenities", "features", "virtual_tour",
})

# Statuses reachable through an update; off-market only through deletion
UPDATABLE_STATUSES = frozenset({
    PropertyStatus.pending.value,
    PropertyStatus.active.value,
    PropertyStatus.sold.value,
})


# NOT NULL columns without a default
REQUIRED_LISTING_FIELDS = ("title", "description", "price", "property_type", "square_footage")


def _validate_listing(data: Dict[str, Any], creating: bool = False) -> None:
    unknown = sorted(set(data) - LISTING_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown property fields: {', '.join(unknown)}", field=unknown[0])
    for field in REQUIRED_LISTING_FIELDS:
        if (creating or field in data) and data.get(field) in (None, ""):
            raise ValidationError(f"{field} is required", field=field)
    property_type = data.get("property_type")
    if property_type is not None and property_type not in {t.value for t in PropertyType}:
        raise ValidationError(f"Invalid property type {property_type}", field="property_type")
    price = data.get("price")
    if price is not None and price < 0:
        raise ValidationError("Price must not be negative", field="price")


class PropertyService(BaseService):
    """Property lifecycle operations"""

    async def _load(self, property_id: int) -> Property:
        prop = await self.uow.properties.get(property_id)
        if not prop:
            raise NotFoundError("Property", property_id)
        return prop

    async def _require_active_agent(self, agent_id: int):
        agent = await self.uow.agents.get(agent_id)
        if not agent or not agent.is_active:
            raise NotFoundError("AgentProfile", agent_id)
        return agent

    async def _require_active_office(self, office_id: Optional[int]):
        if office_id is None:
            raise ValidationError("An office is required", field="office_id")
        office = await self.uow.offices.get(office_id)
        if not office or not office.is_active:
            raise NotFoundError("Office", office_id)
        return office

    async def get_property(self, property_id: int) -> Property:
        return await self._load(property_id)

    async def create_property(self, actor: Actor, data: Dict[str, Any]) -> Property:
        """Create an active listing held by staff.

        Agents list as themselves and must be verified. Unless another office
        is given, managers list under their own office and agents under the
        office on their agent profile.
        """
        authorize(actor, Action.CREATE_PROPERTY)
        data = dict(data)
        agent_id = data.pop("listing_agent_id", None)
        office_id = data.pop("listing_office_id", None)
        _validate_listing(data, creating=True)

        if actor.role == Role.agent.value:
            if actor.verification_status != VerificationStatus.verified.value or actor.agent_profile_id is None:
                raise ValidationError("Only verified agents can create listings")
            agent_id = actor.agent_profile_id
        if office_id is None and actor.role == Role.manager.value:
            office_id = actor.office_id

        async with self.uow:
            if agent_id is not None:
                agent = await self._require_active_agent(agent_id)
                if office_id is None and actor.role == Role.agent.value:
                    office_id = agent.office_id
            if office_id is not None:
                await self._require_active_office(office_id)
            prop = await self.uow.properties.create(obj_in={
                **data,
                "status": PropertyStatus.active.value,
                "listing_agent_id": agent_id,
                "listing_office_id": office_id,
            })
            await self.uow.commit()

        logger.info("Property %s listed by user %s", prop.id, actor.id)
        return prop

    async def submit_property(self, actor: Actor, data: Dict[str, Any]) -> Property:
        """Seller submission: pending, with no agent or office until assigned."""
        authorize(actor, Action.SUBMIT_PROPERTY)
        data = {k: v for k, v in data.items() if k != "mls_number"}
        _validate_listing(data, creating=True)

        async with self.uow:
            prop = await self.uow.properties.create(obj_in={
                **data,
                "status": PropertyStatus.pending.value,
                "listing_agent_id": None,
                "listing_office_id": None,
                "seller_id": actor.id,
            })
            await self.uow.commit()

        logger.info("Property %s submitted by seller %s", prop.id, actor.id)
        return prop

    async def assign_property(
        self, actor: Actor, property_id: int, agent_id: int, office_id: Optional[int] = None
    ) -> Property:
        """Hand a pending submission to an agent and office and activate it.

        The office defaults to the actor's own office.
        """
        authorize(actor, Action.ASSIGN_PROPERTY)

        async with self.uow:
            prop = await self._load(property_id)
            if prop.status != PropertyStatus.pending.value:
                raise ValidationError("Only pending properties can be assigned", field="status")
            await self._require_active_agent(agent_id)
            office = await self._require_active_office(office_id or actor.office_id)

            prop = await self.uow.properties.update(id=prop.id, obj_in={
                "listing_agent_id": agent_id,
                "listing_office_id": office.id,
                "status": PropertyStatus.active.value,
            })
            await self.uow.commit()

        logger.info("Property %s assigned to agent %s (office %s)", prop.id, agent_id, office.id)
        return prop

    async def update_property(self, actor: Actor, property_id: int, changes: Dict[str, Any]) -> Property:
        async with self.uow:
            prop = await self._load(property_id)
            authorize(actor, Action.UPDATE_PROPERTY, Target.for_property(prop))
            check_fields(PROPERTY_FIELDS, actor.role, changes)
            if prop.status == PropertyStatus.off_market.value:
                raise ValidationError("Off-market properties cannot be modified", field="status")

            changes = dict(changes)
            status = changes.pop("status", None)
            agent_id = changes.pop("listing_agent_id", None)
            office_id = changes.pop("listing_office_id", None)
            _validate_listing(changes)

            if status is not None:
                if status not in UPDATABLE_STATUSES:
                    raise ValidationError(f"Invalid status {status}", field="status")
                changes["status"] = status
                if status == PropertyStatus.sold.value and prop.status != PropertyStatus.sold.value:
                    changes["sold_at"] = datetime.utcnow()
                elif status != PropertyStatus.sold.value:
                    changes["sold_at"] = None
            if agent_id is not None:
                await self._require_active_agent(agent_id)
                changes["listing_agent_id"] = agent_id
            if office_id is not None:
                await self._require_active_office(office_id)
                changes["listing_office_id"] = office_id

            prop = await self.uow.properties.update(id=prop.id, obj_in=changes)
            await self.uow.commit()

        return prop

    async def delete_property(self, actor: Actor, property_id: int) -> Property:
        """Take the listing off the market; there is no way back."""
        async with self.uow:
            prop = await self._load(property_id)
            authorize(actor, Action.DELETE_PROPERTY, Target.for_property(prop))
            if prop.status == PropertyStatus.off_market.value:
                raise ValidationError("Property is already off-market", field="status")
            prop = await self.uow.properties.update(
                id=prop.id, obj_in={"status": PropertyStatus.off_market.value}
            )
            await self.uow.commit()

        logger.info("Property %s taken off-market by user %s", prop.id, actor.id)
        return prop
