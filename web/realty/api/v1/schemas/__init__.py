from .auth_schemas import (
    RegisterRequest, LoginRequest, LoginResponse, RefreshTokenRequest, RefreshTokenResponse,
    ChangePasswordRequest, ForgotPasswordRequest, ResetPasswordRequest,
)
from .user_schemas import UserOut
from .agent_schemas import AgentOut
from .office_schemas import OfficeOut
from .property_schemas import PropertyOut

__all__ = [
    # Auth schemas
    "RegisterRequest",
    "LoginRequest",
    "LoginResponse",
    "RefreshTokenRequest",
    "RefreshTokenResponse",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",

    # Entity schemas
    "UserOut",
    "AgentOut",
    "OfficeOut",
    "PropertyOut",
]
