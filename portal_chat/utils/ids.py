# portal_chat/utils/ids.py
from typing import Any
from uuid import UUID

from ..core.exceptions import ValidationException


def parse_uuid(value: Any, field: str) -> UUID:
    """Parse a client supplied id, rejecting it as a 400 when malformed"""
    if isinstance(value, UUID):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationException(f"Missing {field}")
    try:
        return UUID(str(value).strip())
    except ValueError:
        raise ValidationException(f"Invalid {field}")
