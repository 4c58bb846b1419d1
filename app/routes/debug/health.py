"""Debug-only health detail endpoints."""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/health", tags=["debug-health"])


@router.get("/database")
async def database_health(request: Request):
    """Detailed MongoDB health information."""
    mongo = request.app.state.context.mongo
    if mongo is None:
        return {"healthy": False, "error": "MongoDB client not configured"}
    return await mongo.health_check()
