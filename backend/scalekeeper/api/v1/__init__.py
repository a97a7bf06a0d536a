"""Versioned API router."""

from fastapi import APIRouter

from . import (
    animals,
    brumation,
    enclosures,
    feeding,
    feeding_routines,
    health,
    reminders,
    treatments,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(animals.router, prefix="/animals", tags=["animals"])
router.include_router(feeding.router, tags=["feeding"])
router.include_router(
    feeding_routines.router, prefix="/feeding-routines", tags=["feeding-routines"]
)
router.include_router(enclosures.router, tags=["cleaning"])
router.include_router(treatments.router, tags=["treatments"])
router.include_router(
    brumation.router, prefix="/brumation-cycles", tags=["brumation"]
)
router.include_router(reminders.router, prefix="/reminders", tags=["reminders"])

__all__ = ["router"]
