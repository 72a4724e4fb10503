"""Office lifecycle: creation with manager promotion, updates with manager
reassignment, soft deletion with membership cascade."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.base import BaseService
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.permissions import (
    Action, Actor, Target, OFFICE_FIELDS, authorize, check_fields,
)
from ..derived import compute_statistics, current_status, full_address
from ..models import AgentProfile, Office, User
from ..roles import Role, VerificationStatus, ManagerApplicationStatus

logger = logging.getLogger(__name__)

# Fields accepted on creation besides manager_id and franchise_id
CREATE_FIELDS = frozenset({
    "name", "description", "address", "phone", "email", "website",
    "specialties", "services", "languages", "office_hours", "social_media",
    "settings", "market_areas", "is_premium",
})


class OfficeService(BaseService):
    """Office lifecycle operations"""

    async def _load_office(self, office_id: int) -> Office:
        office = await self.uow.offices.get(office_id)
        if not office:
            raise NotFoundError("Office", office_id)
        return office

    async def _load_manager(self, agent_id: int) -> tuple[AgentProfile, User]:
        """Return the nominee's profile and owning account; the account must be verified."""
        profile = await self.uow.agents.get(agent_id)
        if not profile:
            raise NotFoundError("AgentProfile", agent_id)
        owner = await self.uow.users.get(profile.user_id)
        if not owner:
            raise NotFoundError("User", profile.user_id)
        if owner.agent_verification_status != VerificationStatus.verified.value:
            raise ValidationError("Manager must be a verified agent", field="manager_id")
        return profile, owner

    async def _install_manager(self, office: Office, profile: AgentProfile, owner: User) -> None:
        """Make *profile* a member and promote its owner to manager of *office*."""
        await self.uow.offices.add_agent(office.id, profile.id)
        await self.uow.agents.update(id=profile.id, obj_in={"office_id": office.id})

        promotion = {"role": Role.manager.value, "office_id": office.id}
        if owner.manager_application_status == ManagerApplicationStatus.pending.value:
            promotion["manager_application_status"] = ManagerApplicationStatus.approved.value
            promotion["manager_application_approved_at"] = datetime.utcnow()
        await self.uow.users.update(id=owner.id, obj_in=promotion)
        logger.info("User %s promoted to manager of office %s", owner.id, office.id)

    async def _statistics(self, office: Office) -> Dict[str, Any]:
        total_agents = await self.uow.offices.count_agents(office.id)
        active = await self.uow.properties.count_active_for_office(office.id)
        sold = await self.uow.properties.sold_for_office(office.id)
        return compute_statistics(total_agents, active, sold, office.statistics)

    async def _refresh_statistics(self, office: Office) -> None:
        stats = await self._statistics(office)
        await self.uow.offices.update(id=office.id, obj_in={"statistics": stats})

    async def create_office(self, actor: Actor, data: Dict[str, Any]) -> Office:
        """Create an office run by a verified agent.

        The office row, the membership, the manager's profile link and the
        manager's promotion commit together or not at all.
        """
        authorize(actor, Action.CREATE_OFFICE)

        manager_id = data.get("manager_id")
        franchise_id = (data.get("franchise_id") or "").strip().upper()
        if not manager_id:
            raise ValidationError("Manager is required", field="manager_id")
        if not franchise_id:
            raise ValidationError("Franchise ID is required", field="franchise_id")
        unknown = sorted(set(data) - CREATE_FIELDS - {"manager_id", "franchise_id"})
        if unknown:
            raise ValidationError(f"Unknown office fields: {', '.join(unknown)}", field=unknown[0])

        async with self.uow:
            if await self.uow.offices.get_by_franchise_id(franchise_id):
                raise ConflictError("Franchise ID already exists", entity="Office")

            profile, owner = await self._load_manager(manager_id)

            fields = {k: v for k, v in data.items() if k in CREATE_FIELDS and v is not None}
            office = await self.uow.offices.create(obj_in={
                **fields,
                "franchise_id": franchise_id,
                "manager_id": profile.id,
            })
            await self._install_manager(office, profile, owner)
            await self._refresh_statistics(office)
            await self.uow.commit()

        logger.info("Office %s (%s) created by user %s", office.id, franchise_id, actor.id)
        return office

    async def _release_manager(self, office: Office) -> None:
        """Detach the outgoing manager's account from *office*; the role stays."""
        profile = await self.uow.agents.get(office.manager_id)
        if not profile:
            return
        owner = await self.uow.users.get(profile.user_id)
        if owner and owner.office_id == office.id:
            await self.uow.users.update(id=owner.id, obj_in={"office_id": None})
            logger.info("User %s no longer manages office %s", owner.id, office.id)

    async def update_office(self, actor: Actor, office_id: int, changes: Dict[str, Any]) -> Office:
        """Apply whitelisted changes; a new ``manager_id`` reassigns the office.

        The previous manager keeps the manager role but loses the office
        reference.
        """
        async with self.uow:
            office = await self._load_office(office_id)
            authorize(actor, Action.UPDATE_OFFICE, Target.for_office(office))
            check_fields(OFFICE_FIELDS, actor.role, changes)
            if not office.is_active:
                raise ValidationError("Office is deleted")

            changes = dict(changes)
            new_manager_id = changes.pop("manager_id", None)
            if "franchise_id" in changes:
                franchise_id = (changes["franchise_id"] or "").strip().upper()
                if not franchise_id:
                    raise ValidationError("Franchise ID is required", field="franchise_id")
                other = await self.uow.offices.get_by_franchise_id(franchise_id)
                if other and other.id != office.id:
                    raise ConflictError("Franchise ID already exists", entity="Office")
                changes["franchise_id"] = franchise_id

            if new_manager_id is not None and new_manager_id != office.manager_id:
                profile, owner = await self._load_manager(new_manager_id)
                previous = office.manager_id
                await self._release_manager(office)
                changes["manager_id"] = profile.id
                await self._install_manager(office, profile, owner)
                logger.info(
                    "Office %s manager reassigned %s -> %s", office.id, previous, profile.id
                )

            office = await self.uow.offices.update(id=office.id, obj_in=changes)
            await self._refresh_statistics(office)
            await self.uow.commit()

        return office

    async def delete_office(self, actor: Actor, office_id: int) -> Office:
        """Soft-delete the office, deactivate its agents and detach accounts."""
        async with self.uow:
            office = await self._load_office(office_id)
            authorize(actor, Action.DELETE_OFFICE, Target.for_office(office))
            if not office.is_active:
                raise ValidationError("Office is already deleted")

            member_ids = set(await self.uow.offices.list_agent_ids(office.id))
            linked = await self.uow.agents.get_by_office(office.id)
            profiles = {p.id: p for p in linked}
            for profile in await self.uow.agents.get_many(sorted(member_ids - set(profiles))):
                profiles[profile.id] = profile

            for profile in profiles.values():
                patch = {"is_active": False}
                if profile.office_id == office.id:
                    patch["office_id"] = None
                await self.uow.agents.update(id=profile.id, obj_in=patch)

            for account in await self.uow.users.get_by_office(office.id):
                await self.uow.users.update(id=account.id, obj_in={"office_id": None})

            office = await self.uow.offices.update(
                id=office.id,
                obj_in={"is_active": False, "deleted_at": datetime.utcnow()},
            )
            await self.uow.commit()

        logger.info(
            "Office %s deleted by user %s; %d agent profiles deactivated",
            office.id, actor.id, len(profiles),
        )
        return office

    async def get_office(self, office_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Public office details with live statistics."""
        office = await self.uow.offices.get(office_id)
        if not office or not office.is_active or not (office.settings or {}).get("display_on_website", True):
            raise NotFoundError("Office", office_id)

        agent_ids = await self.uow.offices.list_agent_ids(office.id)
        agents = [a for a in await self.uow.agents.get_many(agent_ids) if a.is_active]
        statistics = await self._statistics(office)
        return {
            "office": office,
            "agents": agents,
            "full_address": full_address(office.address),
            "current_status": current_status(office, now),
            "statistics": statistics,
        }
