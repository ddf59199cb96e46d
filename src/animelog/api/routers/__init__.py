"""API routers, aggregated into api_router (mounted under /api)."""

from fastapi import APIRouter

from animelog.api.routers import anime, covers, db, health, mal_import

api_router = APIRouter()
api_router.include_router(covers.router)
api_router.include_router(db.router)
api_router.include_router(anime.router)
api_router.include_router(mal_import.router)
api_router.include_router(health.router)

__all__ = ["anime", "api_router", "covers", "db", "health", "mal_import"]
