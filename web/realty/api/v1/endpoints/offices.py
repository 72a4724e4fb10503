from fastapi import APIRouter, status

from ..schemas.agent_schemas import AgentOut
from ..schemas.office_schemas import OfficeCreate, OfficeUpdate, OfficeOut, OfficeDetailOut
from ....deps import UowDep
from ....security import ActorDep
from ....services.office_service import OfficeService

router = APIRouter()


@router.post("", response_model=OfficeOut, status_code=status.HTTP_201_CREATED)
async def create_office(payload: OfficeCreate, actor: ActorDep, uow: UowDep):
    """Create an office and promote its manager"""
    office = await OfficeService(uow).create_office(actor, payload.model_dump(exclude_unset=True))
    return OfficeOut.model_validate(office)


@router.get("/{office_id}", response_model=OfficeDetailOut)
async def get_office(office_id: int, uow: UowDep):
    result = await OfficeService(uow).get_office(office_id)
    return OfficeDetailOut(
        office=OfficeOut.model_validate(result["office"]),
        agents=[AgentOut.model_validate(a) for a in result["agents"]],
        full_address=result["full_address"],
        current_status=result["current_status"],
        statistics=result["statistics"],
    )


@router.put("/{office_id}", response_model=OfficeOut)
async def update_office(office_id: int, payload: OfficeUpdate, actor: ActorDep, uow: UowDep):
    office = await OfficeService(uow).update_office(actor, office_id, payload.model_dump(exclude_unset=True))
    return OfficeOut.model_validate(office)


@router.delete("/{office_id}", response_model=OfficeOut)
async def delete_office(office_id: int, actor: ActorDep, uow: UowDep):
    """Soft-delete an office"""
    office = await OfficeService(uow).delete_office(actor, office_id)
    return OfficeOut.model_validate(office)
