"""Briefing pipeline: prompt, generation, delivery, orchestration."""

from newsbrief.briefing.errors import (
    BriefingJobError,
    ConfigNotFound,
    DeliveryFailure,
    GenerationFailure,
    ValidationFailure,
)
from newsbrief.briefing.generator import BriefingGenerator, BriefingResult
from newsbrief.briefing.job import BriefingJob, JobOutcome, JobStatus
from newsbrief.briefing.notifier import Notifier
from newsbrief.briefing.prompts import build_briefing_prompt

__all__ = [
    "BriefingGenerator",
    "BriefingJob",
    "BriefingJobError",
    "BriefingResult",
    "ConfigNotFound",
    "DeliveryFailure",
    "GenerationFailure",
    "JobOutcome",
    "JobStatus",
    "Notifier",
    "ValidationFailure",
    "build_briefing_prompt",
]
