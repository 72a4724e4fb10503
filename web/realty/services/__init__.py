from .auth_service import AuthService
from .onboarding_service import OnboardingService
from .agent_service import AgentService
from .office_service import OfficeService
from .property_service import PropertyService
from .user_service import UserService

__all__ = [
    "AuthService",
    "OnboardingService",
    "AgentService",
    "OfficeService",
    "PropertyService",
    "UserService",
]
