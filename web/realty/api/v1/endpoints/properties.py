from fastapi import APIRouter, status

from ..schemas.property_schemas import (
    PropertyCreate, PropertySubmit, PropertyUpdate, PropertyAssign, PropertyOut,
)
from ....deps import UowDep
from ....security import ActorDep
from ....services.property_service import PropertyService

router = APIRouter()


@router.post("", response_model=PropertyOut, status_code=status.HTTP_201_CREATED)
async def create_property(payload: PropertyCreate, actor: ActorDep, uow: UowDep):
    prop = await PropertyService(uow).create_property(actor, payload.model_dump(exclude_unset=True))
    return PropertyOut.model_validate(prop)


@router.post("/submit", response_model=PropertyOut, status_code=status.HTTP_201_CREATED)
async def submit_property(payload: PropertySubmit, actor: ActorDep, uow: UowDep):
    """Seller submission awaiting assignment"""
    prop = await PropertyService(uow).submit_property(actor, payload.model_dump(exclude_unset=True))
    return PropertyOut.model_validate(prop)


@router.get("/{property_id}", response_model=PropertyOut)
async def get_property(property_id: int, uow: UowDep):
    prop = await PropertyService(uow).get_property(property_id)
    return PropertyOut.model_validate(prop)


@router.put("/{property_id}", response_model=PropertyOut)
async def update_property(property_id: int, payload: PropertyUpdate, actor: ActorDep, uow: UowDep):
    prop = await PropertyService(uow).update_property(
        actor, property_id, payload.model_dump(exclude_unset=True)
    )
    return PropertyOut.model_validate(prop)


@router.delete("/{property_id}", response_model=PropertyOut)
async def delete_property(property_id: int, actor: ActorDep, uow: UowDep):
    """Take a listing off the market"""
    prop = await PropertyService(uow).delete_property(actor, property_id)
    return PropertyOut.model_validate(prop)


@router.post("/{property_id}/assign", response_model=PropertyOut)
async def assign_property(property_id: int, payload: PropertyAssign, actor: ActorDep, uow: UowDep):
    prop = await PropertyService(uow).assign_property(actor, property_id, payload.agent_id, payload.office_id)
    return PropertyOut.model_validate(prop)
