from typing import Any, Optional, Dict


class BaseError(Exception):
    """Base exception class for the application.

    ``kind`` is the stable category callers branch on; ``status_code`` is its
    HTTP rendering.
    """

    kind: str = "Internal"

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BaseError):
    """Exception raised when an entity is not found"""

    kind = "NotFound"

    def __init__(self, entity: str, id: Any):
        super().__init__(
            message=f"{entity} with id {id} not found",
            status_code=404,
            details={"entity": entity, "id": id}
        )


class ValidationError(BaseError):
    """Exception raised for malformed or semantically illegal input"""

    kind = "InvalidArgument"

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=400,
            details=details
        )


class AuthenticationError(BaseError):
    """Exception raised when no valid actor identity is present"""

    kind = "Unauthorized"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message=message, status_code=401)


class AuthorizationError(BaseError):
    """Exception raised when the actor lacks the privilege for an action"""

    kind = "Forbidden"

    def __init__(self, message: str = "Access denied", action: Optional[str] = None):
        details = {"action": action} if action else {}
        super().__init__(message=message, status_code=403, details=details)


class ConflictError(BaseError):
    """Exception raised for uniqueness or duplicate-state violations"""

    kind = "Conflict"

    def __init__(self, message: str, entity: Optional[str] = None):
        details = {"entity": entity} if entity else {}
        super().__init__(message=message, status_code=409, details=details)


class InternalError(BaseError):
    """Exception raised when the store or another dependency fails unexpectedly"""

    kind = "Internal"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message=message, status_code=500)
