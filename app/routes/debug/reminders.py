"""Debug-only privacy reminder job endpoints."""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/reminders", tags=["debug-reminders"])


@router.get("/status")
async def reminder_status(request: Request):
    """Current job status and metrics of the last completed cycle."""
    return request.app.state.context.reminder_job.get_job_status()
