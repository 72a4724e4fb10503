"""Shared pytest fixtures and configuration."""

import os

# Set test environment variables before the application reads its settings
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DB_DSN", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_DEFAULT", "10000/minute")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from realty.core.permissions import Actor
from realty.core.unit_of_work import UnitOfWork
from realty.models import Base, User, AgentProfile, Office, OfficeAgent, Property
from realty.roles import Role, VerificationStatus
from realty.security import hash_password

PASSWORD = "password123"


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def uow(session) -> UnitOfWork:
    return UnitOfWork(session)


@pytest.fixture
def make_user(session):
    """Factory persisting an account; keyword arguments override defaults."""
    counter = {"n": 0}

    async def _make(role: str = Role.buyer.value, **fields) -> User:
        counter["n"] += 1
        data = {
            "email": f"user{counter['n']}@realty.io",
            "password_hash": hash_password(PASSWORD),
            "first_name": "Test",
            "last_name": f"User{counter['n']}",
            "role": role,
        }
        data.update(fields)
        user = User(**data)
        session.add(user)
        await session.commit()
        return user

    return _make


@pytest.fixture
def make_agent(session, make_user):
    """Factory for an agent account with a profile.

    ``verified=True`` gives an active profile and a verified account.
    """

    async def _make(verified: bool = True, office_id=None, **user_fields):
        status = VerificationStatus.verified.value if verified else VerificationStatus.pending.value
        user = await make_user(role=Role.agent.value, agent_verification_status=status, **user_fields)
        profile = AgentProfile(
            user_id=user.id,
            license_number=f"LIC-{user.id}",
            license_state="CA",
            is_active=verified,
            office_id=office_id,
        )
        session.add(profile)
        await session.flush()
        user.agent_profile_id = profile.id
        await session.commit()
        return user, profile

    return _make


@pytest.fixture
def make_office(session, make_agent):
    """Factory for an office whose manager has been promoted."""
    counter = {"n": 0}

    async def _make(**fields):
        counter["n"] += 1
        manager_user, manager_profile = await make_agent()
        office = Office(
            name=f"Office {counter['n']}",
            franchise_id=f"FR-{counter['n']:03d}",
            phone="+14155550100",
            email=f"office{counter['n']}@realty.io",
            address={"street": "1 Main St", "city": "Austin", "state": "TX", "zip_code": "78701"},
            manager_id=manager_profile.id,
            **fields,
        )
        session.add(office)
        await session.flush()
        session.add(OfficeAgent(office_id=office.id, agent_id=manager_profile.id))
        manager_profile.office_id = office.id
        manager_user.role = Role.manager.value
        manager_user.office_id = office.id
        await session.commit()
        return office, manager_user, manager_profile

    return _make


@pytest.fixture
def make_property(session):
    counter = {"n": 0}

    async def _make(**fields) -> Property:
        counter["n"] += 1
        data = {
            "title": f"Listing {counter['n']}",
            "description": "Three bedroom family home",
            "price": 450000,
            "property_type": "house",
            "bedrooms": 3,
            "bathrooms": 2,
            "square_footage": 1800,
            "address": {"street": f"{counter['n']} Oak Ave", "city": "Austin", "state": "TX", "zip_code": "78702"},
        }
        data.update(fields)
        prop = Property(**data)
        session.add(prop)
        await session.commit()
        return prop

    return _make


def actor_for(user: User) -> Actor:
    return Actor.from_user(user)


@pytest.fixture
def actor():
    return actor_for
