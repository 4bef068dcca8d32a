"""
Briefing trigger endpoints.

POST /generate runs the pipeline for one user and reports the failing stage.
GET /generate is the scheduler entry point: it runs every user whose
schedule is due at the current instant in the reference timezone.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from newsbrief.api.models import CronTriggerResponse, GenerateRequest
from newsbrief.briefing.errors import BriefingJobError, ValidationFailure
from newsbrief.briefing.job import BriefingJob, get_briefing_job
from newsbrief.infrastructure.auth import require_api_token
from newsbrief.observability.logging import get_logger
from newsbrief.observability.telemetry import counter, log_event
from newsbrief.utils.error_sanitizer import sanitize_error_message
from newsbrief.utils.redaction import redact

router = APIRouter(tags=["briefing"], dependencies=[Depends(require_api_token)])
logger = get_logger(__name__)


def _error_response(error: BriefingJobError) -> JSONResponse:
    content: dict[str, object] = {
        "error": sanitize_error_message(error.message, error.status_code),
        "stage": error.stage,
    }
    if isinstance(error, ValidationFailure):
        content["missing"] = error.missing
    return JSONResponse(status_code=error.status_code, content=content)


@router.post("/generate")
def generate_briefing(
    request: GenerateRequest,
    job: BriefingJob = Depends(get_briefing_job),
) -> JSONResponse:
    """
    Generate and send one user's briefing now.

    Side Effects:
        - Calls the Gemini API with the user's key
        - Sends one email through the user's sender account
    """
    user_ref = redact(request.user_id)
    log_event("api.generate.requested", user=user_ref)

    try:
        job.execute(request.user_id)
    except BriefingJobError as e:
        counter(f"api.generate.{e.outcome_status}")
        logger.warning("Generate for %s failed at %s: %s", user_ref, e.stage, e.message)
        return _error_response(e)
    except Exception as e:
        counter("api.generate.error")
        logger.exception("Unexpected error generating briefing for %s", user_ref)
        return JSONResponse(
            status_code=500,
            content={"error": sanitize_error_message(str(e), 500), "stage": "job"},
        )

    counter("api.generate.success")
    return JSONResponse(status_code=200, content={"success": True})


@router.get("/generate", response_model=CronTriggerResponse)
def cron_trigger(job: BriefingJob = Depends(get_briefing_job)) -> CronTriggerResponse:
    """
    Scheduler entry point; call it every SCHEDULE_WINDOW_MINUTES.

    Per-user failures are reported in results and never fail the request.
    """
    outcomes = job.run_due()
    results = {user_id: outcome.status.value for user_id, outcome in outcomes.items()}
    log_event(
        "api.cron.triggered",
        triggered=len(results),
        failed=sum(1 for outcome in outcomes.values() if not outcome.ok),
    )
    return CronTriggerResponse(message="Cron triggered", triggered=len(results), results=results)
