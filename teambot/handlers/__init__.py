"""Handlers package."""

from .entities import router as entities_router
from .registration import router as registration_router

__all__ = ["registration_router", "entities_router"]
