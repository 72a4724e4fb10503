from fastapi import APIRouter

from ..schemas.user_schemas import (
    RoleSelect, RoleSelectOut, OnboardingComplete, OnboardingCompleteOut,
    OnboardingStatusOut, RolesOut,
)
from ....deps import UowDep
from ....security import ActorDep
from ....services.onboarding_service import OnboardingService

router = APIRouter()


@router.post("/{user_id}/role", response_model=RoleSelectOut)
async def select_role(user_id: int, payload: RoleSelect, actor: ActorDep, uow: UowDep):
    """Pick the primary role (buyer, seller or agent)"""
    return await OnboardingService(uow).select_role(actor, user_id, payload.role)


@router.post("/{user_id}/roles", response_model=RolesOut)
async def add_role(user_id: int, payload: RoleSelect, actor: ActorDep, uow: UowDep):
    """Add a secondary role; repeating a role is a no-op"""
    return await OnboardingService(uow).add_role(actor, user_id, payload.role)


@router.get("/{user_id}/onboarding", response_model=OnboardingStatusOut)
async def onboarding_status(user_id: int, actor: ActorDep, uow: UowDep):
    return await OnboardingService(uow).get_status(actor, user_id)


@router.post("/{user_id}/onboarding", response_model=OnboardingCompleteOut)
async def complete_onboarding(user_id: int, payload: OnboardingComplete, actor: ActorDep, uow: UowDep):
    return await OnboardingService(uow).complete_onboarding(actor, user_id, payload.role, payload.data)
