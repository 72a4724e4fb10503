from datetime import datetime

from sqlalchemy import (
    String, Integer, ForeignKey, Numeric, DateTime, Text, Float,
    JSON, Index, Boolean,
)
from sqlalchemy.orm import mapped_column, DeclarativeBase

from .roles import Role, VerificationStatus, ManagerApplicationStatus, PropertyStatus


def _default_onboarding() -> dict:
    return {Role.buyer.value: False, Role.seller.value: False, Role.agent.value: False}


def _default_preferences() -> dict:
    return {
        "property_types": [],
        "price_range": {"min": 0, "max": 1000000},
        "locations": [],
        "notifications": {"email": True, "sms": False, "push": True},
    }


def _default_office_hours() -> list:
    weekdays = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    hours = [{"day": d, "open": "09:00", "close": "17:00", "closed": False} for d in weekdays]
    hours += [{"day": d, "open": None, "close": None, "closed": True} for d in ("Saturday", "Sunday")]
    return hours


def _default_office_settings() -> dict:
    return {"timezone": "America/New_York", "display_on_website": True, "accepting_clients": True}


def _default_statistics() -> dict:
    return {
        "total_agents": 0,
        "active_listings": 0,
        "sold_this_year": 0,
        "total_volume": 0,
        "average_days_on_market": 0,
    }


class Base(DeclarativeBase): ...


# ---------- Accounts ----------
class User(Base):
    __tablename__ = "users"
    id             = mapped_column(Integer, primary_key=True)
    email          = mapped_column(String(128), unique=True, nullable=False)
    password_hash  = mapped_column(String(128), nullable=False)
    first_name     = mapped_column(String(64), nullable=False)
    last_name      = mapped_column(String(64), nullable=False)
    phone          = mapped_column(String(32))
    # Primary role; secondary roles live in additional_roles
    role           = mapped_column(String(16), default=Role.buyer.value, nullable=False)
    additional_roles     = mapped_column(JSON, default=list, nullable=False)
    onboarding_completed = mapped_column(JSON, default=_default_onboarding, nullable=False)
    # Derived from onboarding_completed[role]; written only by the onboarding rules
    is_profile_complete  = mapped_column(Boolean, default=False, nullable=False)
    agent_verification_status = mapped_column(
        String(16), default=VerificationStatus.none.value, nullable=False
    )
    agent_profile_id = mapped_column(ForeignKey("agent_profiles.id", use_alter=True), nullable=True)
    office_id        = mapped_column(ForeignKey("offices.id", use_alter=True), nullable=True)

    # Manager application sub-record
    manager_application_status     = mapped_column(
        String(16), default=ManagerApplicationStatus.none.value, nullable=False
    )
    manager_application_office_id  = mapped_column(ForeignKey("offices.id", use_alter=True), nullable=True)
    manager_application_message    = mapped_column(Text)
    manager_application_applied_at = mapped_column(DateTime)
    manager_application_approved_at = mapped_column(DateTime)

    preferences    = mapped_column(JSON, default=_default_preferences, nullable=False)
    is_active      = mapped_column(Boolean, default=True, nullable=False)
    last_login     = mapped_column(DateTime)
    password_reset_token   = mapped_column(String(64), index=True)
    password_reset_expires = mapped_column(DateTime)
    created_at     = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at     = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class AgentProfile(Base):
    __tablename__ = "agent_profiles"
    id        = mapped_column(Integer, primary_key=True)
    # Unique: at most one profile per account, concurrent applications collide here
    user_id   = mapped_column(ForeignKey("users.id"), unique=True, nullable=False)
    bio       = mapped_column(Text)
    license_number     = mapped_column(String(64), nullable=False)
    license_state      = mapped_column(String(2), nullable=False)
    license_expiration = mapped_column(DateTime)
    years_experience   = mapped_column(Integer, default=0, nullable=False)
    specialties        = mapped_column(JSON, default=list, nullable=False)
    languages          = mapped_column(JSON, default=list, nullable=False)
    social_media       = mapped_column(JSON, default=dict, nullable=False)
    profile_image      = mapped_column(String(256))
    office_id = mapped_column(ForeignKey("offices.id", use_alter=True), nullable=True)
    is_active = mapped_column(Boolean, default=False, nullable=False)
    created_at = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


# ---------- Offices ----------
class OfficeAgent(Base):
    """Office membership (the manager is always a member)."""
    __tablename__ = "office_agents"
    office_id = mapped_column(ForeignKey("offices.id"), primary_key=True)
    agent_id  = mapped_column(ForeignKey("agent_profiles.id"), primary_key=True)
    added_at  = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class Office(Base):
    __tablename__ = "offices"
    id           = mapped_column(Integer, primary_key=True)
    name         = mapped_column(String(120), nullable=False)
    franchise_id = mapped_column(String(32), unique=True, nullable=False)
    description  = mapped_column(Text)
    address      = mapped_column(JSON, default=dict, nullable=False)
    phone        = mapped_column(String(32), nullable=False)
    email        = mapped_column(String(128), nullable=False)
    website      = mapped_column(String(256))
    specialties  = mapped_column(JSON, default=list, nullable=False)
    services     = mapped_column(JSON, default=list, nullable=False)
    languages    = mapped_column(JSON, default=list, nullable=False)
    office_hours = mapped_column(JSON, default=_default_office_hours, nullable=False)
    social_media = mapped_column(JSON, default=dict, nullable=False)
    settings     = mapped_column(JSON, default=_default_office_settings, nullable=False)
    market_areas = mapped_column(JSON, default=list, nullable=False)
    is_premium   = mapped_column(Boolean, default=False, nullable=False)
    manager_id   = mapped_column(ForeignKey("agent_profiles.id"), nullable=False)
    # Recomputed from membership and listings, never edited by hand
    statistics   = mapped_column(JSON, default=_default_statistics, nullable=False)
    is_active    = mapped_column(Boolean, default=True, nullable=False)
    deleted_at   = mapped_column(DateTime)
    created_at   = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at   = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


# ---------- Listings ----------
class Property(Base):
    __tablename__ = "properties"
    id            = mapped_column(Integer, primary_key=True)
    # Seller submissions have no MLS number until listed
    mls_number    = mapped_column(String(32), unique=True, nullable=True)
    title         = mapped_column(String(200), nullable=False)
    description   = mapped_column(Text, nullable=False)
    price         = mapped_column(Numeric(14, 2), nullable=False)
    property_type = mapped_column(String(16), nullable=False)
    status        = mapped_column(String(16), default=PropertyStatus.pending.value, nullable=False)
    bedrooms      = mapped_column(Integer, default=0, nullable=False)
    bathrooms     = mapped_column(Float, default=0, nullable=False)
    square_footage = mapped_column(Integer, nullable=False)
    lot_size      = mapped_column(Float)
    year_built    = mapped_column(Integer)
    address       = mapped_column(JSON, default=dict, nullable=False)
    images        = mapped_column(JSON, default=list, nullable=False)
    amenities     = mapped_column(JSON, default=list, nullable=False)
    features      = mapped_column(JSON, default=dict, nullable=False)
    virtual_tour  = mapped_column(String(256))
    listing_agent_id  = mapped_column(ForeignKey("agent_profiles.id"), nullable=True)
    listing_office_id = mapped_column(ForeignKey("offices.id"), nullable=True)
    seller_id         = mapped_column(ForeignKey("users.id"), nullable=True)
    sold_at       = mapped_column(DateTime)
    created_at    = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at    = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_properties_status", "status"),
        Index("ix_properties_listing_office", "listing_office_id"),
    )


class FavoriteProperty(Base):
    __tablename__ = "favorite_properties"
    user_id     = mapped_column(ForeignKey("users.id"), primary_key=True)
    property_id = mapped_column(ForeignKey("properties.id"), primary_key=True)
    added_at    = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class SavedSearch(Base):
    __tablename__ = "saved_searches"
    id           = mapped_column(Integer, primary_key=True)
    user_id      = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    name         = mapped_column(String(120), nullable=False)
    filters      = mapped_column(JSON, default=dict, nullable=False)
    email_alerts = mapped_column(Boolean, default=True, nullable=False)
    frequency    = mapped_column(String(16), default="weekly", nullable=False)
    created_at   = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at   = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
