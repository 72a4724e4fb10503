from typing import List

from fastapi import APIRouter, status

from ..schemas.user_schemas import (
    UserOut, UserDetailOut, UserUpdate, ActivityOut, PreferencesUpdate,
    SavedSearchIn, SavedSearchUpdate, SavedSearchOut, FavoriteIdsOut,
)
from ..schemas.property_schemas import PropertyOut
from ....deps import UowDep
from ....security import ActorDep
from ....services.user_service import UserService

router = APIRouter()


@router.get("/{user_id}", response_model=UserDetailOut)
async def get_user(user_id: int, actor: ActorDep, uow: UowDep):
    result = await UserService(uow).get_user(actor, user_id)
    return UserDetailOut(user=UserOut.model_validate(result["user"]), stats=result["stats"])


@router.put("/{user_id}", response_model=UserOut)
async def update_user(user_id: int, payload: UserUpdate, actor: ActorDep, uow: UowDep):
    user = await UserService(uow).update_user(actor, user_id, payload.model_dump(exclude_unset=True))
    return UserOut.model_validate(user)


@router.delete("/{user_id}", response_model=UserOut)
async def deactivate_user(user_id: int, actor: ActorDep, uow: UowDep):
    """Deactivate an account (soft delete)"""
    user = await UserService(uow).deactivate_user(actor, user_id)
    return UserOut.model_validate(user)


@router.get("/{user_id}/activity", response_model=ActivityOut)
async def get_activity(user_id: int, actor: ActorDep, uow: UowDep):
    return await UserService(uow).get_activity(actor, user_id)


@router.put("/{user_id}/preferences")
async def update_preferences(user_id: int, payload: PreferencesUpdate, actor: ActorDep, uow: UowDep):
    preferences = await UserService(uow).update_preferences(
        actor, user_id, payload.model_dump(exclude_none=True)
    )
    return {"preferences": preferences}


# Favorites
@router.get("/{user_id}/favorites", response_model=List[PropertyOut])
async def list_favorites(user_id: int, actor: ActorDep, uow: UowDep):
    properties = await UserService(uow).list_favorites(actor, user_id)
    return [PropertyOut.model_validate(p) for p in properties]


@router.post("/{user_id}/favorites/{property_id}", response_model=FavoriteIdsOut)
async def add_favorite(user_id: int, property_id: int, actor: ActorDep, uow: UowDep):
    ids = await UserService(uow).add_favorite(actor, user_id, property_id)
    return FavoriteIdsOut(favorites=ids)


@router.delete("/{user_id}/favorites/{property_id}", response_model=FavoriteIdsOut)
async def remove_favorite(user_id: int, property_id: int, actor: ActorDep, uow: UowDep):
    ids = await UserService(uow).remove_favorite(actor, user_id, property_id)
    return FavoriteIdsOut(favorites=ids)


# Saved searches
@router.get("/{user_id}/saved-searches", response_model=List[SavedSearchOut])
async def list_saved_searches(user_id: int, actor: ActorDep, uow: UowDep):
    searches = await UserService(uow).list_saved_searches(actor, user_id)
    return [SavedSearchOut.model_validate(s) for s in searches]


@router.post("/{user_id}/saved-searches", response_model=SavedSearchOut, status_code=status.HTTP_201_CREATED)
async def add_saved_search(user_id: int, payload: SavedSearchIn, actor: ActorDep, uow: UowDep):
    search = await UserService(uow).add_saved_search(actor, user_id, payload.model_dump())
    return SavedSearchOut.model_validate(search)


@router.put("/{user_id}/saved-searches/{search_id}", response_model=SavedSearchOut)
async def update_saved_search(
    user_id: int, search_id: int, payload: SavedSearchUpdate, actor: ActorDep, uow: UowDep
):
    search = await UserService(uow).update_saved_search(
        actor, user_id, search_id, payload.model_dump(exclude_unset=True)
    )
    return SavedSearchOut.model_validate(search)


@router.delete("/{user_id}/saved-searches/{search_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_search(user_id: int, search_id: int, actor: ActorDep, uow: UowDep):
    await UserService(uow).delete_saved_search(actor, user_id, search_id)
