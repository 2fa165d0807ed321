"""
API routes module.

FastAPI routers for all HTTP endpoints. The WebSocket router is mounted
separately, outside the versioned prefix.
"""

from fastapi import APIRouter

from .routers import (
    chat_router,
    health_router,
    materials_router,
)

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(chat_router)
api_router.include_router(materials_router)

__all__ = ["api_router"]
