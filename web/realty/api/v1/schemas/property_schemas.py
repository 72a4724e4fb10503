"""Property schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class PropertyBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    property_type: str
    bedrooms: int = Field(0, ge=0)
    bathrooms: float = Field(0, ge=0)
    square_footage: int = Field(..., ge=0)
    lot_size: Optional[float] = Field(None, ge=0)
    year_built: Optional[int] = None
    address: Dict[str, Any]
    images: List[Dict[str, Any]] = []
    amenities: List[str] = []
    features: Dict[str, Any] = {}
    virtual_tour: Optional[str] = None


class PropertyCreate(PropertyBase):
    """Staff listing; agents always list as themselves."""
    mls_number: Optional[str] = Field(None, max_length=32)
    listing_agent_id: Optional[int] = None
    listing_office_id: Optional[int] = None


class PropertySubmit(PropertyBase):
    """Seller submission; goes live only after assignment."""


class PropertyUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    property_type: Optional[str] = None
    status: Optional[str] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    square_footage: Optional[int] = Field(None, ge=0)
    lot_size: Optional[float] = Field(None, ge=0)
    year_built: Optional[int] = None
    address: Optional[Dict[str, Any]] = None
    images: Optional[List[Dict[str, Any]]] = None
    amenities: Optional[List[str]] = None
    features: Optional[Dict[str, Any]] = None
    virtual_tour: Optional[str] = None
    mls_number: Optional[str] = Field(None, max_length=32)
    listing_agent_id: Optional[int] = None
    listing_office_id: Optional[int] = None


class PropertyAssign(BaseModel):
    agent_id: int
    office_id: Optional[int] = None


class PropertyOut(BaseModel):
    id: int
    mls_number: Optional[str] = None
    title: str
    description: str
    price: float
    property_type: str
    status: str
    bedrooms: int
    bathrooms: float
    square_footage: int
    lot_size: Optional[float] = None
    year_built: Optional[int] = None
    address: Dict[str, Any]
    images: List[Dict[str, Any]]
    amenities: List[str]
    features: Dict[str, Any]
    virtual_tour: Optional[str] = None
    listing_agent_id: Optional[int] = None
    listing_office_id: Optional[int] = None
    seller_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
