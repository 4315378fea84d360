"""API dependencies."""

from checkout.api.dependencies.auth import verify_api_key
from checkout.api.dependencies.services import get_service

__all__ = ["get_service", "verify_api_key"]
