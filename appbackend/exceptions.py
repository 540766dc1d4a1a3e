"""
AppBackend — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for every failure the insert pipeline,
       the identity layer and the public browsing endpoints can report.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers registered in main.py map them to HTTP statuses
       and a structured JSON body.
Who:   Raised by services and dependencies; caught by the global handlers.

Exception Hierarchy:
    AppBackendError (base)
    ├── ValidationError          → 400 Bad Request (malformed body / params)
    ├── AuthenticationError      → 401 Unauthorized (no or invalid identity)
    ├── ForbiddenError           → 403 Forbidden (parent owned by someone else)
    ├── NotFoundError            → 404 Not Found (required parent missing)
    ├── ConflictError            → 409 Conflict (duplicate unique key)
    └── InternalError            → 500 Internal Server Error (storage, signing)
        └── PostActionError      → 500, resource committed but follow-up failed
"""

from typing import Any, Dict, Optional


class AppBackendError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AppBackendError):
    """
    Raised when a request body or query parameter cannot be decoded.

    HTTP: 400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Invalid boxes body",
            "details": {"errors": [{"loc": ["boxID"], "msg": "Input should be a valid UUID"}]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(AppBackendError):
    """
    Raised when an operation requires an identity and none (or an invalid one)
    was presented.

    HTTP: 401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(AppBackendError):
    """
    Raised when the acting user does not own the parent a new resource points to.

    HTTP: 403 Forbidden
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Access to the referenced {resource} is denied"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class NotFoundError(AppBackendError):
    """
    Raised when a required resource does not exist.

    When: a required parent reference is null or points nowhere, or a public
          browsing lookup matches nothing.
    HTTP: 404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(AppBackendError):
    """
    Raised when a create would duplicate a unique key (e.g. a user nickname).

    HTTP: 409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InternalError(AppBackendError):
    """
    Raised when storage or credential signing fails.

    HTTP: 500 Internal Server Error

    The message returned to the client is generic; details are logged
    server-side only.
    """

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PostActionError(InternalError):
    """
    Raised when a post-action fails after the primary row was committed.

    The resource exists; mirroring or enrollment may be incomplete. The new
    identifier and any response headers already minted (the device
    credential) travel with the error so the handler can still return them.
    """

    def __init__(
        self,
        resource: str,
        resource_id: str,
        headers: Optional[Dict[str, str]] = None,
        cause: Optional[BaseException] = None,
    ):
        ctx: Dict[str, Any] = {"resource": resource, "id": resource_id}
        if cause is not None:
            ctx["cause"] = type(cause).__name__
        super().__init__(
            message=(
                f"The {resource} entry was created but its synchronisation "
                f"could not be completed"
            ),
            context=ctx,
        )
        self.resource_id = resource_id
        self.headers = dict(headers or {})
        self.cause = cause
