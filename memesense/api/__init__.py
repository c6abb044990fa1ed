"""HTTP API for MemeSense sessions."""
from .routes import router

__all__ = ["router"]
