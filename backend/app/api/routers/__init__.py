"""
Routers API du tracker d'activites.

Ce module regroupe tous les sous-routers et expose un router principal
a inclure dans l'application FastAPI.
"""
from fastapi import APIRouter

from app.api.routers.activity_router import router as activity_router
from app.api.routers.statistics_router import router as statistics_router
from app.api.routers._shared import limiter

router = APIRouter()

router.include_router(activity_router)
router.include_router(statistics_router)

__all__ = ["router", "limiter"]
