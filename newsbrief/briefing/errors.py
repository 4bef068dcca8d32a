"""
Failure taxonomy for briefing jobs.

Each error names the pipeline stage it came from and the HTTP status the
trigger endpoint reports for it.
"""

from __future__ import annotations


class BriefingJobError(Exception):
    """Base class for attributable briefing job failures."""

    stage: str = "job"
    status_code: int = 500
    outcome_status: str = "error"

    def __init__(self, message: str, user_id: str | None = None, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        if stage is not None:
            self.stage = stage


class ConfigNotFound(BriefingJobError):
    """No settings saved for the user. Fixed by configuring the briefing."""

    stage = "fetch_config"
    status_code = 404
    outcome_status = "config_not_found"


class ValidationFailure(BriefingJobError):
    """Required credential fields are empty; raised before any external call."""

    stage = "validate"
    status_code = 400
    outcome_status = "validation_failed"

    def __init__(self, message: str, missing: list[str], user_id: str | None = None):
        super().__init__(message, user_id=user_id)
        self.missing = list(missing)


class GenerationFailure(BriefingJobError):
    """
    The generative API did not produce a briefing.

    kind is "transport" for network/HTTP/API errors and "content" when the
    response arrived but had no usable text.
    """

    stage = "generate"
    status_code = 500
    outcome_status = "generation_failed"

    TRANSPORT = "transport"
    CONTENT = "content"

    def __init__(self, message: str, kind: str = TRANSPORT, user_id: str | None = None):
        super().__init__(message, user_id=user_id)
        self.kind = kind


class DeliveryFailure(BriefingJobError):
    """The email provider rejected the credentials or the connection failed."""

    stage = "deliver"
    status_code = 500
    outcome_status = "delivery_failed"
