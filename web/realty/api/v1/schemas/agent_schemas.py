"""Agent application and verification schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class AgentApplication(BaseModel):
    license_number: str = Field(..., min_length=1, max_length=64)
    license_state: str = Field(..., min_length=2, max_length=2)
    license_expiration: Optional[datetime] = None
    bio: Optional[str] = Field(None, max_length=1000)
    years_experience: int = Field(0, ge=0)
    specialties: List[str] = []
    languages: List[str] = []
    social_media: Dict[str, str] = {}
    profile_image: Optional[str] = None
    office_id: Optional[int] = None


class AgentOut(BaseModel):
    id: int
    user_id: int
    bio: Optional[str] = None
    license_number: str
    license_state: str
    license_expiration: Optional[datetime] = None
    years_experience: int
    specialties: List[str]
    languages: List[str]
    social_media: Dict[str, str]
    profile_image: Optional[str] = None
    office_id: Optional[int] = None
    is_active: bool

    model_config = {"from_attributes": True}


class VerifyRequest(BaseModel):
    action: str = Field(..., description="approve or reject")


class VerifyOut(BaseModel):
    agent_id: int
    user_id: int
    is_active: bool
    agent_verification_status: str


class ManagerApplicationIn(BaseModel):
    office_id: Optional[int] = None
    message: Optional[str] = Field(None, max_length=500)


class ManagerApplicationOut(BaseModel):
    status: str
    office_id: Optional[int] = None
    message: Optional[str] = None
    applied_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None


class PendingAgentOut(BaseModel):
    agent: AgentOut
    user_id: int
    email: str
    first_name: str
    last_name: str
    applied_at: datetime


class AgentPublicOut(BaseModel):
    agent: AgentOut
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    active_listings: int
    sold_listings: int
