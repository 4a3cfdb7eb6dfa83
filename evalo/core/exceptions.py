"""
Application error taxonomy
"""

from typing import Optional, Dict, Any


class BaseApplicationError(Exception):
    """Base class for errors surfaced to API callers"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BaseApplicationError):
    """A referenced record does not exist"""

    def __init__(self, resource: str, resource_id: Any, message: Optional[str] = None):
        self.resource = resource
        self.resource_id = resource_id
        message = message or f"{resource} not found: {resource_id}"
        super().__init__(message, "NOT_FOUND", {"resource": resource, "id": str(resource_id)})


class InvalidCodeError(BaseApplicationError):
    """Access code is malformed or does not resolve to an open event"""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Invalid or expired access code", "INVALID_CODE")


class ValidationError(BaseApplicationError):
    """Input failed a business validation rule"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else None)


class ClassificationUnavailableError(BaseApplicationError):
    """Sentiment classifier unreachable or returned an unusable answer"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        details = {"upstream_status": status_code} if status_code is not None else None
        super().__init__(message, "CLASSIFICATION_UNAVAILABLE", details)


class CounterUpdateError(BaseApplicationError):
    """Feedback row written but the event counters could not be updated"""

    def __init__(self, event_id: Any, message: Optional[str] = None):
        self.event_id = event_id
        message = message or f"Counter update failed for event {event_id}"
        super().__init__(message, "COUNTER_UPDATE_FAILED", {"event_id": str(event_id)})


class EventStateError(BaseApplicationError):
    """Operation not allowed in the event's current status"""

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(
            message,
            "INVALID_EVENT_STATE",
            {"status": current_status} if current_status else None
        )


class CodeGenerationError(BaseApplicationError):
    """Could not find a free entry code"""
    pass


class AuthenticationError(BaseApplicationError):
    """Missing or invalid access token"""
    pass


class AuthorizationError(BaseApplicationError):
    """Authenticated profile may not perform the operation"""
    pass
