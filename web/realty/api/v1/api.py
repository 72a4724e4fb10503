from fastapi import APIRouter

from .endpoints import auth, users, onboarding, agents, offices, properties


# Create main API router
api_v1_router = APIRouter()

# Auth endpoints (public access; /me and /change-password resolve the actor)
api_v1_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["auth"]
)

# Account profile and personal collections
api_v1_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"]
)

# Role selection and onboarding (self-service)
api_v1_router.include_router(
    onboarding.router,
    prefix="/users",
    tags=["onboarding"]
)

# Agent applications and verification
api_v1_router.include_router(
    agents.router,
    prefix="/agents",
    tags=["agents"]
)

# Offices
api_v1_router.include_router(
    offices.router,
    prefix="/offices",
    tags=["offices"]
)

# Properties
api_v1_router.include_router(
    properties.router,
    prefix="/properties",
    tags=["properties"]
)
