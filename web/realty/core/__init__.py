from .base import BaseRepository, IRepository, BaseService
from .exceptions import (
    BaseError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
)
from .config import Settings, get_settings

__all__ = [
    # Base classes
    "BaseRepository",
    "IRepository",
    "BaseService",

    # Exceptions
    "BaseError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "InternalError",

    # Config
    "Settings",
    "get_settings"
]
