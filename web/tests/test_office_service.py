from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from realty.core.exceptions import (
    AuthorizationError, ConflictError, InternalError, NotFoundError, ValidationError,
)
from realty.models import AgentProfile, Office, OfficeAgent, User
from realty.services.office_service import OfficeService


def office_payload(manager_id, franchise_id="FR-100", **extra):
    data = {
        "name": "Downtown Realty",
        "franchise_id": franchise_id,
        "phone": "+15125550199",
        "email": "downtown@realty.io",
        "address": {"street": "500 Congress Ave", "city": "Austin", "state": "TX", "zip_code": "78701"},
        "manager_id": manager_id,
    }
    data.update(extra)
    return data


async def office_count(session):
    return (await session.execute(select(func.count()).select_from(Office))).scalar()


@pytest.mark.asyncio
async def test_create_office_promotes_manager(uow, session, make_user, make_agent, actor):
    admin = await make_user(role="admin")
    owner, profile = await make_agent(verified=True, manager_application_status="pending")

    office = await OfficeService(uow).create_office(actor(admin), office_payload(profile.id, "fr-100"))

    assert office.franchise_id == "FR-100"
    assert office.manager_id == profile.id
    assert office.statistics["total_agents"] == 1
    assert owner.role == "manager"
    assert owner.office_id == office.id
    assert owner.manager_application_status == "approved"
    assert owner.manager_application_approved_at is not None
    assert profile.office_id == office.id
    assert await session.get(OfficeAgent, (office.id, profile.id)) is not None


@pytest.mark.asyncio
async def test_duplicate_franchise_conflicts(uow, session, make_user, make_office, make_agent, actor):
    await make_office()  # FR-001
    admin = await make_user(role="admin")
    _, profile = await make_agent(verified=True)
    snapshot = actor(admin)
    payload = office_payload(profile.id, "fr-001")

    with pytest.raises(ConflictError):
        await OfficeService(uow).create_office(snapshot, payload)
    assert await office_count(session) == 1


@pytest.mark.asyncio
async def test_unverified_manager_leaves_nothing_behind(uow, session, make_user, make_agent, actor):
    admin = await make_user(role="admin")
    owner, profile = await make_agent(verified=False)
    owner_id, profile_id = owner.id, profile.id
    snapshot = actor(admin)

    with pytest.raises(ValidationError):
        await OfficeService(uow).create_office(snapshot, office_payload(profile_id))

    assert await office_count(session) == 0
    owner = await session.get(User, owner_id)
    await session.refresh(owner)
    assert owner.role == "agent"


@pytest.mark.asyncio
async def test_storage_failure_rolls_back_every_write(uow, session, make_user, make_agent, actor):
    admin = await make_user(role="admin")
    owner, profile = await make_agent(verified=True)
    owner_id, profile_id = owner.id, profile.id
    snapshot = actor(admin)
    uow.offices.add_agent = AsyncMock(side_effect=SQLAlchemyError("boom"))

    with pytest.raises(InternalError):
        await OfficeService(uow).create_office(snapshot, office_payload(profile_id))

    assert await office_count(session) == 0
    owner = await session.get(User, owner_id)
    profile = await session.get(AgentProfile, profile_id)
    await session.refresh(owner)
    await session.refresh(profile)
    assert owner.role == "agent"
    assert owner.office_id is None
    assert profile.office_id is None


@pytest.mark.asyncio
async def test_create_office_validation(uow, make_user, make_agent, actor):
    admin = await make_user(role="admin")
    _, profile = await make_agent(verified=True)
    service = OfficeService(uow)

    with pytest.raises(ValidationError):
        await service.create_office(actor(admin), office_payload(None))
    with pytest.raises(ValidationError):
        await service.create_office(actor(admin), office_payload(profile.id, franchise_id="  "))
    with pytest.raises(ValidationError):
        await service.create_office(actor(admin), office_payload(profile.id, statistics={}))


@pytest.mark.asyncio
async def test_agents_cannot_create_offices(uow, make_agent, actor):
    user, profile = await make_agent(verified=True)
    with pytest.raises(AuthorizationError):
        await OfficeService(uow).create_office(actor(user), office_payload(profile.id))


@pytest.mark.asyncio
async def test_manager_updates_own_office(uow, make_office, actor):
    office, manager, _ = await make_office()
    updated = await OfficeService(uow).update_office(actor(manager), office.id, {"name": "Renamed"})
    assert updated.name == "Renamed"


@pytest.mark.asyncio
async def test_manager_cannot_touch_other_office(uow, make_office, actor):
    _, manager, _ = await make_office()
    other, _, _ = await make_office()
    with pytest.raises(AuthorizationError):
        await OfficeService(uow).update_office(actor(manager), other.id, {"name": "Mine now"})


@pytest.mark.asyncio
async def test_manager_cannot_change_franchise(uow, make_office, actor):
    office, manager, _ = await make_office()
    with pytest.raises(ValidationError):
        await OfficeService(uow).update_office(actor(manager), office.id, {"franchise_id": "FR-777"})


@pytest.mark.asyncio
async def test_admin_franchise_change_conflicts(uow, make_office, make_user, actor):
    office, _, _ = await make_office()
    await make_office()  # FR-002
    admin = await make_user(role="admin")
    with pytest.raises(ConflictError):
        await OfficeService(uow).update_office(actor(admin), office.id, {"franchise_id": "fr-002"})


@pytest.mark.asyncio
async def test_manager_reassignment_keeps_previous_role(uow, make_office, make_agent, make_user, actor):
    office, old_manager, _ = await make_office()
    new_owner, new_profile = await make_agent(verified=True)
    admin = await make_user(role="admin")

    updated = await OfficeService(uow).update_office(actor(admin), office.id, {"manager_id": new_profile.id})

    assert updated.manager_id == new_profile.id
    assert updated.statistics["total_agents"] == 2
    assert new_owner.role == "manager"
    assert new_owner.office_id == office.id
    assert old_manager.role == "manager"
    assert old_manager.office_id is None


@pytest.mark.asyncio
async def test_previous_manager_loses_office_authority(uow, make_office, make_agent, make_user, actor):
    office, old_manager, old_profile = await make_office()
    _, new_profile = await make_agent(verified=True)
    admin = await make_user(role="admin")
    office_id, old_profile_id, new_profile_id = office.id, old_profile.id, new_profile.id
    service = OfficeService(uow)

    await service.update_office(actor(admin), office_id, {"manager_id": new_profile_id})
    former = actor(old_manager)

    with pytest.raises(AuthorizationError):
        await service.delete_office(former, office_id)
    with pytest.raises(AuthorizationError):
        await service.update_office(former, office_id, {"manager_id": old_profile_id})

    office = await service.get_office(office_id)
    assert office["office"].manager_id == new_profile_id


@pytest.mark.asyncio
async def test_delete_office_cascades(uow, session, make_office, make_agent, make_user, actor):
    office, manager, manager_profile = await make_office()
    agent_user, agent_profile = await make_agent(verified=True, office_id=office.id)
    agent_user.office_id = office.id
    await session.commit()
    admin = await make_user(role="admin")

    deleted = await OfficeService(uow).delete_office(actor(admin), office.id)

    assert deleted.is_active is False
    assert deleted.deleted_at is not None
    for profile in (manager_profile, agent_profile):
        assert profile.is_active is False
        assert profile.office_id is None
    assert manager.office_id is None
    assert agent_user.office_id is None
    assert manager.role == "manager"


@pytest.mark.asyncio
async def test_delete_office_twice(uow, make_office, make_user, actor):
    office, _, _ = await make_office()
    office_id = office.id
    admin = await make_user(role="admin")
    snapshot = actor(admin)
    service = OfficeService(uow)
    await service.delete_office(snapshot, office_id)

    with pytest.raises(ValidationError):
        await service.delete_office(snapshot, office_id)


@pytest.mark.asyncio
async def test_get_office_details(uow, make_office, make_agent, make_property):
    office, _, manager_profile = await make_office()
    await make_agent(verified=False, office_id=office.id)
    await make_property(listing_office_id=office.id, status="active")

    # Monday 11:00 in New York
    details = await OfficeService(uow).get_office(office.id, now=datetime(2026, 10, 19, 15, 0))

    assert [a.id for a in details["agents"]] == [manager_profile.id]
    assert details["full_address"] == "1 Main St, Austin, TX 78701"
    assert details["current_status"] == "open"
    assert details["statistics"]["total_agents"] == 1
    assert details["statistics"]["active_listings"] == 1


@pytest.mark.asyncio
async def test_get_office_closed_on_sunday(uow, make_office):
    office, _, _ = await make_office()
    details = await OfficeService(uow).get_office(office.id, now=datetime(2026, 10, 18, 15, 0))
    assert details["current_status"] == "closed"


@pytest.mark.asyncio
async def test_hidden_office_not_found(uow, make_office):
    office, _, _ = await make_office(settings={"timezone": "UTC", "display_on_website": False})
    with pytest.raises(NotFoundError):
        await OfficeService(uow).get_office(office.id)
