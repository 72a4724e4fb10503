"""Account, onboarding and personal collection schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class UserOut(BaseModel):
    """Schema for user response"""
    id: int
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: str
    additional_roles: List[str] = []
    onboarding_completed: Dict[str, bool] = {}
    is_profile_complete: bool
    agent_verification_status: str
    agent_profile_id: Optional[int] = None
    office_id: Optional[int] = None
    manager_application_status: str
    preferences: Dict[str, Any] = {}
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserStats(BaseModel):
    favorites_count: int
    saved_searches_count: int


class UserDetailOut(BaseModel):
    user: UserOut
    stats: UserStats


class UserUpdate(BaseModel):
    """Only the fields sent are applied; which ones a role may send is checked by the service."""
    first_name: Optional[str] = Field(None, max_length=64)
    last_name: Optional[str] = Field(None, max_length=64)
    phone: Optional[str] = Field(None, max_length=32)
    preferences: Optional[Dict[str, Any]] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None


class ActivityOut(BaseModel):
    last_login: Optional[datetime] = None
    member_since: datetime
    favorites_count: int
    saved_searches_count: int
    recent_searches: List[str]


# Roles & onboarding
class RoleSelect(BaseModel):
    role: str


class RoleSelectOut(BaseModel):
    role: str
    is_profile_complete: bool
    next_stage: str


class OnboardingComplete(BaseModel):
    role: str
    data: Dict[str, Any] = {}


class OnboardingCompleteOut(BaseModel):
    onboarding_completed: Dict[str, bool]
    is_profile_complete: bool
    saved_search_id: Optional[int] = None
    next_stage: str


class OnboardingStatusOut(BaseModel):
    is_complete: bool
    role: str
    additional_roles: List[str]
    onboarding_completed: Dict[str, bool]
    agent_verification_status: str
    next_steps: List[str]


class RolesOut(BaseModel):
    role: str
    additional_roles: List[str]


# Preferences
class PriceRange(BaseModel):
    min: float = Field(0, ge=0)
    max: float = Field(1000000, ge=0)


class PreferencesUpdate(BaseModel):
    property_types: Optional[List[str]] = None
    price_range: Optional[PriceRange] = None
    locations: Optional[List[str]] = None
    notifications: Optional[Dict[str, bool]] = None


# Saved searches
class SavedSearchIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    filters: Dict[str, Any] = {}
    email_alerts: bool = True
    frequency: str = "weekly"


class SavedSearchUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    filters: Optional[Dict[str, Any]] = None
    email_alerts: Optional[bool] = None
    frequency: Optional[str] = None


class SavedSearchOut(BaseModel):
    id: int
    name: str
    filters: Dict[str, Any]
    email_alerts: bool
    frequency: str
    created_at: datetime

    model_config = {"from_attributes": True}


class FavoriteIdsOut(BaseModel):
    favorites: List[int]
