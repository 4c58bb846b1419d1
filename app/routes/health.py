"""
Health check endpoints with MongoDB and reminder job monitoring.
"""

import time

from fastapi import APIRouter, Request

from app.infrastructure.observability.logging import log_health_check

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "privacy-reminder"}


@router.get("/readyz")
async def readyz(request: Request):
    """
    Readiness check across MongoDB, the reminder job and configuration.
    """
    context = request.app.state.context
    checks = {}
    overall_ok = True

    # 1) MongoDB
    t0 = time.time()
    if context.mongo is None:
        checks["mongodb"] = {"ok": False, "error": "MongoDB client not configured"}
        overall_ok = False
    else:
        try:
            mongo_health = await context.mongo.health_check()
            is_healthy = mongo_health.get("healthy", False)
            checks["mongodb"] = {
                "ok": is_healthy,
                "latency_ms": round((time.time() - t0) * 1000, 1),
            }
            if not is_healthy:
                checks["mongodb"]["error"] = mongo_health.get("error", "MongoDB unhealthy")
            overall_ok = overall_ok and is_healthy
        except Exception as e:
            checks["mongodb"] = {
                "ok": False,
                "error": f"{type(e).__name__}: {e}",
                "latency_ms": round((time.time() - t0) * 1000, 1),
            }
            overall_ok = False

    log_health_check(
        "mongodb",
        checks["mongodb"]["ok"],
        checks["mongodb"].get("latency_ms", 0.0),
        checks["mongodb"].get("error"),
    )

    # 2) Reminder job
    job_health = context.reminder_job.health_check()
    checks["privacy_reminder_job"] = {
        "ok": job_health["healthy"],
        "is_running": job_health["is_running"],
        "last_run_time": job_health["last_run_time"],
        "consecutive_failures": job_health["consecutive_failures"],
    }
    if "warning" in job_health:
        checks["privacy_reminder_job"]["warning"] = job_health["warning"]
    overall_ok = overall_ok and job_health["healthy"]

    # 3) Configuration
    settings = context.settings
    config_issues = []

    if not settings.FIREBASE_CREDENTIALS_PATH:
        config_issues.append("FIREBASE_CREDENTIALS_PATH not set")

    if not settings.smtp_configured():
        config_issues.append("SMTP_HOST or EMAIL_FROM not set")

    config_ok = not config_issues
    checks["configuration"] = {
        "ok": config_ok,
        "issues": config_issues if config_issues else None,
        "environment": settings.environment,
    }
    overall_ok = overall_ok and config_ok

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
