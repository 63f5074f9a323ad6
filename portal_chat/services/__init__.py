from .base_service import BaseService
from .identity_service import IdentityService

__all__ = ["BaseService", "IdentityService"]
