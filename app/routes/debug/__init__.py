"""Debug route aggregation."""

from fastapi import APIRouter

from app.routes.debug import health, reminders

router = APIRouter()

router.include_router(health.router)
router.include_router(reminders.router)
