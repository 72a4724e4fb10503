"""Office schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, EmailStr, Field

from .agent_schemas import AgentOut


class Address(BaseModel):
    street: str
    city: str
    state: str
    zip_code: str
    coordinates: Optional[Dict[str, float]] = None


class OfficeHours(BaseModel):
    day: str
    open: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    close: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    closed: bool = False


class OfficeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    franchise_id: str = Field(..., min_length=1, max_length=32)
    manager_id: int
    address: Address
    phone: str = Field(..., max_length=32)
    email: EmailStr
    description: Optional[str] = None
    website: Optional[str] = None
    specialties: Optional[List[str]] = None
    services: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    office_hours: Optional[List[OfficeHours]] = None
    social_media: Optional[Dict[str, str]] = None
    settings: Optional[Dict[str, Any]] = None
    market_areas: Optional[List[str]] = None
    is_premium: Optional[bool] = None


class OfficeUpdate(BaseModel):
    """Every field optional; the allowed set depends on the caller's role."""
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    franchise_id: Optional[str] = Field(None, min_length=1, max_length=32)
    manager_id: Optional[int] = None
    address: Optional[Address] = None
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[EmailStr] = None
    description: Optional[str] = None
    website: Optional[str] = None
    specialties: Optional[List[str]] = None
    services: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    office_hours: Optional[List[OfficeHours]] = None
    social_media: Optional[Dict[str, str]] = None
    settings: Optional[Dict[str, Any]] = None
    market_areas: Optional[List[str]] = None
    is_premium: Optional[bool] = None


class OfficeOut(BaseModel):
    id: int
    name: str
    franchise_id: str
    description: Optional[str] = None
    address: Dict[str, Any]
    phone: str
    email: str
    website: Optional[str] = None
    specialties: List[str]
    services: List[str]
    languages: List[str]
    office_hours: List[Dict[str, Any]]
    social_media: Dict[str, Any]
    settings: Dict[str, Any]
    market_areas: List[str]
    is_premium: bool
    manager_id: int
    statistics: Dict[str, Any]
    is_active: bool
    deleted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OfficeDetailOut(BaseModel):
    office: OfficeOut
    agents: List[AgentOut]
    full_address: str
    current_status: str
    statistics: Dict[str, Any]
