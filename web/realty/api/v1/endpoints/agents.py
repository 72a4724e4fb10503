from typing import List

from fastapi import APIRouter, Query, status

from ..schemas.agent_schemas import (
    AgentApplication, AgentOut, VerifyRequest, VerifyOut, ManagerApplicationIn,
    ManagerApplicationOut, PendingAgentOut, AgentPublicOut,
)
from ....deps import UowDep
from ....security import ActorDep
from ....services.agent_service import AgentService

router = APIRouter()


@router.post("/apply", response_model=AgentOut, status_code=status.HTTP_201_CREATED)
async def apply(payload: AgentApplication, actor: ActorDep, uow: UowDep):
    """Apply (or re-apply after rejection) to become an agent"""
    profile = await AgentService(uow).apply(actor, payload.model_dump())
    return AgentOut.model_validate(profile)


@router.post("/manager-application", response_model=ManagerApplicationOut)
async def apply_for_manager(payload: ManagerApplicationIn, actor: ActorDep, uow: UowDep):
    return await AgentService(uow).apply_for_manager(actor, payload.office_id, payload.message)


@router.get("/pending", response_model=List[PendingAgentOut])
async def list_pending(
    actor: ActorDep,
    uow: UowDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
):
    """Applications awaiting an admin decision"""
    rows = await AgentService(uow).list_pending(actor, skip=skip, limit=limit)
    return [PendingAgentOut(**{**row, "agent": AgentOut.model_validate(row["agent"])}) for row in rows]


@router.post("/{agent_id}/verify", response_model=VerifyOut)
async def verify(agent_id: int, payload: VerifyRequest, actor: ActorDep, uow: UowDep):
    return await AgentService(uow).verify(actor, agent_id, payload.action)


@router.get("/{agent_id}", response_model=AgentPublicOut)
async def get_agent(agent_id: int, uow: UowDep):
    """Public profile of a verified agent"""
    result = await AgentService(uow).get_public_profile(agent_id)
    return AgentPublicOut(**{**result, "agent": AgentOut.model_validate(result["agent"])})
