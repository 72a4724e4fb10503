"""Agent applications, admin verification and manager applications."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.base import BaseService
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.permissions import Action, Actor, authorize
from ..core.verification import VerificationAction, next_status, parse_decision
from ..models import AgentProfile, User
from ..roles import Role, VerificationStatus, ManagerApplicationStatus

logger = logging.getLogger(__name__)

APPLICATION_FIELDS = (
    "bio",
    "license_number",
    "license_state",
    "license_expiration",
    "years_experience",
    "specialties",
    "languages",
    "social_media",
    "profile_image",
)

REQUIRED_APPLICATION_FIELDS = ("license_number", "license_state")


class AgentService(BaseService):
    """Agent verification workflow"""

    async def _load_user(self, user_id: int) -> User:
        user = await self.uow.users.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def _require_office(self, office_id: Optional[int]) -> None:
        if office_id is None:
            return
        office = await self.uow.offices.get(office_id)
        if not office or not office.is_active:
            raise NotFoundError("Office", office_id)

    async def apply(self, actor: Actor, application: Dict[str, Any]) -> AgentProfile:
        """Submit an agent application for the actor's own account.

        A first application creates the (inactive) agent profile. A rejected
        applicant re-applies by overwriting that same profile. Verified agents
        and accounts with an application already on file get a conflict.
        """
        authorize(actor, Action.APPLY_AGENT)

        async with self.uow:
            user = await self._load_user(actor.id)
            status = user.agent_verification_status

            if status == VerificationStatus.verified.value:
                raise ConflictError("Agent is already verified", entity="AgentProfile")

            existing = await self.uow.agents.get_by_user_id(user.id)
            if existing and status != VerificationStatus.rejected.value:
                raise ConflictError("Agent application already exists", entity="AgentProfile")

            new_status = next_status(status, VerificationAction.apply)
            for field in REQUIRED_APPLICATION_FIELDS:
                if not application.get(field):
                    raise ValidationError(f"{field} is required", field=field)
            office_id = application.get("office_id")
            await self._require_office(office_id)

            fields = {k: application[k] for k in APPLICATION_FIELDS if k in application}
            if existing:
                profile = await self.uow.agents.update(
                    id=existing.id,
                    obj_in={**fields, "office_id": office_id, "is_active": False},
                )
            else:
                profile = await self.uow.agents.create(obj_in={
                    **fields,
                    "user_id": user.id,
                    "office_id": office_id,
                    "is_active": False,
                })

            user.agent_profile_id = profile.id
            user.agent_verification_status = new_status
            await self.uow.commit()

        logger.info("User %s applied as agent (profile %s)", user.id, profile.id)
        return profile

    async def verify(self, actor: Actor, agent_id: int, action: str) -> Dict[str, Any]:
        """Approve or reject an agent application (admin only)."""
        authorize(actor, Action.VERIFY_AGENT)
        decision = parse_decision(action)

        async with self.uow:
            profile = await self.uow.agents.get(agent_id)
            if not profile:
                raise NotFoundError("AgentProfile", agent_id)
            user = await self._load_user(profile.user_id)

            new_status = next_status(user.agent_verification_status, decision)
            if decision == VerificationAction.approve:
                profile = await self.uow.agents.update(id=profile.id, obj_in={"is_active": True})
            user = await self.uow.users.update(
                id=user.id, obj_in={"agent_verification_status": new_status}
            )
            await self.uow.commit()

        logger.info(
            "Admin %s %sd agent %s (user %s)", actor.id, decision.value, profile.id, user.id
        )
        return {
            "agent_id": profile.id,
            "user_id": user.id,
            "is_active": profile.is_active,
            "agent_verification_status": user.agent_verification_status,
        }

    async def apply_for_manager(
        self, actor: Actor, office_id: Optional[int] = None, message: Optional[str] = None
    ) -> Dict[str, Any]:
        """File a manager application. Never changes the role; promotion only
        happens when the agent is named manager of an office."""
        authorize(actor, Action.APPLY_MANAGER)

        async with self.uow:
            user = await self._load_user(actor.id)
            if (
                user.role != Role.agent.value
                or user.agent_verification_status != VerificationStatus.verified.value
            ):
                raise ValidationError("Only verified agents can apply for manager")
            if user.manager_application_status == ManagerApplicationStatus.pending.value:
                raise ConflictError("Manager application already pending", entity="ManagerApplication")
            await self._require_office(office_id)

            user.manager_application_status = ManagerApplicationStatus.pending.value
            user.manager_application_office_id = office_id
            user.manager_application_message = message
            user.manager_application_applied_at = datetime.utcnow()
            user.manager_application_approved_at = None
            await self.uow.commit()

        logger.info("User %s applied for manager (office %s)", user.id, office_id)
        return manager_application(user)

    async def list_pending(self, actor: Actor, *, skip: int = 0, limit: int = 50) -> List[Dict[str, Any]]:
        authorize(actor, Action.LIST_PENDING_AGENTS)
        rows = await self.uow.agents.list_pending(skip=skip, limit=limit)
        return [
            {
                "agent": profile,
                "user_id": user.id,
                "email": user.email,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "applied_at": profile.updated_at,
            }
            for profile, user in rows
        ]

    async def get_public_profile(self, agent_id: int) -> Dict[str, Any]:
        profile = await self.uow.agents.get(agent_id)
        if not profile:
            raise NotFoundError("AgentProfile", agent_id)
        if not profile.is_active:
            raise ValidationError("Agent is not verified")
        user = await self._load_user(profile.user_id)
        active = await self.uow.properties.count_for_agent(profile.id, "active")
        sold = await self.uow.properties.count_for_agent(profile.id, "sold")
        return {
            "agent": profile,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "phone": user.phone,
            "active_listings": active,
            "sold_listings": sold,
        }


def manager_application(user: User) -> Dict[str, Any]:
    return {
        "status": user.manager_application_status,
        "office_id": user.manager_application_office_id,
        "message": user.manager_application_message,
        "applied_at": user.manager_application_applied_at,
        "approved_at": user.manager_application_approved_at,
    }
