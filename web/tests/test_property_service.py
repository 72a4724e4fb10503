import pytest

from realty.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from realty.services.property_service import PropertyService

LISTING = {
    "title": "Bright condo near the lake",
    "description": "Two bedrooms, updated kitchen",
    "price": 325000,
    "property_type": "condo",
    "bedrooms": 2,
    "bathrooms": 2,
    "square_footage": 1100,
    "address": {"street": "9 Lake Dr", "city": "Austin", "state": "TX", "zip_code": "78703"},
}


@pytest.mark.asyncio
async def test_manager_of_other_office_forbidden(uow, make_office, make_property, actor):
    _, manager_o1, _ = await make_office()
    office_o2, _, _ = await make_office()
    prop = await make_property(listing_office_id=office_o2.id, status="active")

    with pytest.raises(AuthorizationError):
        await PropertyService(uow).update_property(actor(manager_o1), prop.id, {"price": 1})


@pytest.mark.asyncio
async def test_manager_updates_property_in_own_office(uow, make_office, make_property, actor):
    office, manager, _ = await make_office()
    prop = await make_property(listing_office_id=office.id, status="active")

    updated = await PropertyService(uow).update_property(actor(manager), prop.id, {"mls_number": "MLS-1"})
    assert updated.mls_number == "MLS-1"


@pytest.mark.asyncio
async def test_agent_creates_listing_as_self(uow, make_office, make_agent, actor):
    office, manager, _ = await make_office()
    user, profile = await make_agent(verified=True, office_id=office.id)
    assert user.office_id is None
    service = PropertyService(uow)

    prop = await service.create_property(actor(user), {**LISTING, "listing_agent_id": 999})
    assert prop.status == "active"
    assert prop.listing_agent_id == profile.id
    assert prop.listing_office_id == office.id

    updated = await service.update_property(actor(manager), prop.id, {"price": 455000})
    assert updated.price == 455000


@pytest.mark.asyncio
async def test_unverified_agent_cannot_list(uow, make_agent, actor):
    user, _ = await make_agent(verified=False)
    with pytest.raises(ValidationError):
        await PropertyService(uow).create_property(actor(user), LISTING)


@pytest.mark.asyncio
async def test_create_rejects_bad_input(uow, make_user, actor):
    admin = await make_user(role="admin")
    service = PropertyService(uow)
    with pytest.raises(ValidationError):
        await service.create_property(actor(admin), {**LISTING, "property_type": "castle"})
    with pytest.raises(ValidationError):
        await service.create_property(actor(admin), {**LISTING, "price": -5})
    with pytest.raises(ValidationError):
        await service.create_property(actor(admin), {**LISTING, "seller_id": 1})


@pytest.mark.asyncio
async def test_agent_scope_is_own_listings(uow, make_agent, make_property, actor):
    user, profile = await make_agent(verified=True)
    other_user, other_profile = await make_agent(verified=True)
    mine = await make_property(listing_agent_id=profile.id, status="active")
    theirs = await make_property(listing_agent_id=other_profile.id, status="active")
    theirs_id = theirs.id
    service = PropertyService(uow)

    updated = await service.update_property(actor(user), mine.id, {"status": "sold"})
    assert updated.sold_at is not None

    with pytest.raises(AuthorizationError):
        await service.update_property(actor(user), theirs_id, {"price": 1})


@pytest.mark.asyncio
async def test_agent_cannot_reassign_listing(uow, make_agent, make_property, actor):
    user, profile = await make_agent(verified=True)
    prop = await make_property(listing_agent_id=profile.id, status="active")
    with pytest.raises(ValidationError):
        await PropertyService(uow).update_property(actor(user), prop.id, {"listing_agent_id": 5})


@pytest.mark.asyncio
async def test_status_update_cannot_take_off_market(uow, make_user, make_property, actor):
    admin = await make_user(role="admin")
    prop = await make_property(status="active")
    with pytest.raises(ValidationError):
        await PropertyService(uow).update_property(actor(admin), prop.id, {"status": "off-market"})


@pytest.mark.asyncio
async def test_seller_submission_then_assignment(uow, make_user, make_office, make_agent, actor):
    seller = await make_user(role="seller")
    office, manager, _ = await make_office()
    _, agent_profile = await make_agent(verified=True, office_id=office.id)
    service = PropertyService(uow)

    prop = await service.submit_property(actor(seller), {**LISTING, "mls_number": "IGNORED"})
    assert prop.status == "pending"
    assert prop.seller_id == seller.id
    assert prop.mls_number is None
    assert prop.listing_agent_id is None

    assigned = await service.assign_property(actor(manager), prop.id, agent_profile.id)
    assert assigned.status == "active"
    assert assigned.listing_agent_id == agent_profile.id
    assert assigned.listing_office_id == office.id


@pytest.mark.asyncio
async def test_buyers_cannot_submit(uow, make_user, actor):
    buyer = await make_user()
    with pytest.raises(AuthorizationError):
        await PropertyService(uow).submit_property(actor(buyer), LISTING)


@pytest.mark.asyncio
async def test_assign_requires_pending_and_active_agent(uow, make_office, make_agent, make_property, actor):
    office, manager, _ = await make_office()
    _, inactive_profile = await make_agent(verified=False)
    _, agent_profile = await make_agent(verified=True)
    active = await make_property(status="active")
    pending = await make_property(status="pending")
    active_id, pending_id = active.id, pending.id
    service = PropertyService(uow)
    snapshot = actor(manager)

    with pytest.raises(ValidationError):
        await service.assign_property(snapshot, active_id, agent_profile.id)
    with pytest.raises(NotFoundError):
        await service.assign_property(snapshot, pending_id, inactive_profile.id)


@pytest.mark.asyncio
async def test_soft_delete_is_final(uow, make_user, make_property, actor):
    admin = await make_user(role="admin")
    prop = await make_property(status="active")
    prop_id = prop.id
    snapshot = actor(admin)
    service = PropertyService(uow)

    deleted = await service.delete_property(snapshot, prop_id)
    assert deleted.status == "off-market"

    with pytest.raises(ValidationError):
        await service.delete_property(snapshot, prop_id)
    with pytest.raises(ValidationError):
        await service.update_property(snapshot, prop_id, {"status": "active"})


@pytest.mark.asyncio
async def test_get_missing_property(uow):
    with pytest.raises(NotFoundError):
        await PropertyService(uow).get_property(404)


@pytest.mark.asyncio
async def test_missing_required_listing_field_is_invalid(uow, make_user, actor):
    admin = await make_user(role="admin")
    seller = await make_user(role="seller")
    service = PropertyService(uow)
    listing = {k: v for k, v in LISTING.items() if k != "square_footage"}

    with pytest.raises(ValidationError) as exc:
        await service.create_property(actor(admin), listing)
    assert exc.value.details == {"field": "square_footage"}
    with pytest.raises(ValidationError):
        await service.submit_property(actor(seller), listing)


@pytest.mark.asyncio
async def test_required_field_cannot_be_cleared(uow, make_property, make_user, actor):
    admin = await make_user(role="admin")
    prop = await make_property(status="active")
    with pytest.raises(ValidationError) as exc:
        await PropertyService(uow).update_property(actor(admin), prop.id, {"title": None})
    assert exc.value.details == {"field": "title"}


@pytest.mark.asyncio
async def test_repository_maps_integrity_errors(uow):
    row = {k: v for k, v in LISTING.items() if k != "square_footage"}

    with pytest.raises(ValidationError):
        async with uow:
            await uow.properties.create(obj_in=row)

    with pytest.raises(ConflictError):
        async with uow:
            await uow.properties.create(obj_in={**LISTING, "mls_number": "MLS-7"})
            await uow.properties.create(obj_in={**LISTING, "mls_number": "MLS-7"})
