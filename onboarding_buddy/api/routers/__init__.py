"""API routers."""

from .chat import router as chat_router
from .chat_stream import ConnectionRegistry
from .chat_stream import router as chat_stream_router
from .health import router as health_router
from .materials import router as materials_router

__all__ = [
    "ConnectionRegistry",
    "chat_router",
    "chat_stream_router",
    "health_router",
    "materials_router",
]
