# portal_chat/core/exceptions.py
"""Custom exceptions for the chat service.

Every error carries an HTTP status code so the same hierarchy can be rendered
by the FastAPI exception handlers and by the WebSocket gateway, which turns it
into an error acknowledgement.
"""
from typing import Optional


class ChatError(Exception):
    """Base exception for the chat service."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class AuthenticationError(ChatError):
    """Missing, malformed, invalid or expired bearer token."""
    status_code = 401
    default_message = "Unauthorized"


class ValidationException(ChatError):
    """Request data rejected before any persistence."""
    status_code = 400
    default_message = "Invalid request data"


class SelfChatError(ValidationException):
    default_message = "Cannot chat with yourself"


class ChatAccessDenied(ChatError):
    """Caller is not a participant of the chat."""
    status_code = 403
    default_message = "Not allowed in chat"


class RoleNotAllowed(ChatError):
    """Caller's role cannot take part in a private chat."""
    status_code = 403
    default_message = "Role not allowed in private chat"


class NotFoundError(ChatError):
    status_code = 404
    default_message = "Resource not found"

    def __init__(self, resource: Optional[str] = None, id: Optional[str] = None):
        message = None
        if resource:
            message = f"{resource} not found"
            if id:
                message += f" with id: {id}"
        super().__init__(message)


class UserNotFound(NotFoundError):
    def __init__(self, id: Optional[str] = None):
        super().__init__("User", id)


class ChatNotFound(NotFoundError):
    def __init__(self, id: Optional[str] = None):
        super().__init__("Chat", id)
