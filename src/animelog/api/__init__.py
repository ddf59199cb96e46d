"""API module for animelog.

Hey future me - the entry point is `api_router` from routers/, mounted under /api
in main.py. Structure:
- routers/: covers, db, anime, import, health endpoints
- schemas/: camelCase Pydantic models
- dependencies.py: pulls services from app.state
- exception_handlers.py: domain exception -> HTTP status mapping
"""

from animelog.api.routers import api_router

__all__ = ["api_router"]
