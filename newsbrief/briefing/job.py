"""Briefing job orchestration: fetch config, generate, deliver.

One job is strictly sequential. Batches (run_all / run_due) run jobs in a
bounded thread pool; each job works on its own config snapshot, and one
user's failure never affects another user's job.
"""

from __future__ import annotations

import concurrent.futures
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from newsbrief.briefing.errors import (
    BriefingJobError,
    ConfigNotFound,
    DeliveryFailure,
    GenerationFailure,
    ValidationFailure,
)
from newsbrief.briefing.generator import BriefingGenerator
from newsbrief.briefing.notifier import Notifier
from newsbrief.briefing.schedule import is_due, reference_now
from newsbrief.config import JOB_MAX_WORKERS, SCHEDULE_WINDOW_MINUTES
from newsbrief.observability.logging import get_logger
from newsbrief.observability.telemetry import counter, log_event, time_block
from newsbrief.storage.config_repository import ScheduleSlot
from newsbrief.storage.models import BriefingConfig
from newsbrief.utils.redaction import redact

logger = get_logger(__name__)


class ConfigStore(Protocol):
    def get(self, user_id: str) -> BriefingConfig | None: ...

    def list_user_ids(self) -> list[str]: ...

    def list_schedules(self) -> list[ScheduleSlot]: ...


class JobStatus(str, Enum):
    """Terminal state of one job."""

    SUCCESS = "success"
    CONFIG_NOT_FOUND = "config_not_found"
    VALIDATION_FAILED = "validation_failed"
    GENERATION_FAILED = "generation_failed"
    DELIVERY_FAILED = "delivery_failed"
    ERROR = "error"


@dataclass(frozen=True)
class JobOutcome:
    user_id: str
    status: JobStatus
    stage: str
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is JobStatus.SUCCESS

    def to_dict(self) -> dict[str, str]:
        return {"status": self.status.value, "stage": self.stage, "message": self.message}


class BriefingJob:
    """
    Runs the briefing pipeline for one user or a batch of users.

    Failures are reported, never retried; re-triggering is the caller's call.
    """

    def __init__(
        self,
        store: ConfigStore,
        generator: BriefingGenerator | None = None,
        notifier: Notifier | None = None,
        max_workers: int = JOB_MAX_WORKERS,
    ):
        self.store = store
        self.generator = generator or BriefingGenerator()
        self.notifier = notifier or Notifier()
        self.max_workers = max(1, max_workers)

    def execute(self, user_id: str) -> None:
        """
        Run the pipeline for one user, raising on the first failing stage.

        Raises:
            ConfigNotFound: nothing stored for user_id (no side effects)
            ValidationFailure: required credentials empty (no external call made)
            GenerationFailure: Gemini call failed or returned no text
            DeliveryFailure: email could not be sent
            BriefingJobError: unexpected error while reading the config
        """
        user_ref = redact(user_id)

        try:
            config = self.store.get(user_id)
        except Exception as e:
            logger.exception("Failed to load config for user %s", user_ref)
            raise BriefingJobError(
                f"Could not read stored settings: {type(e).__name__}",
                user_id=user_id,
                stage=ConfigNotFound.stage,
            ) from e

        if config is None:
            raise ConfigNotFound("User config not found", user_id=user_id)

        missing = config.missing_required_fields()
        if missing:
            raise ValidationFailure(
                f"Missing required settings: {', '.join(missing)}",
                missing=missing,
                user_id=user_id,
            )

        try:
            html = self.generator.generate(config)
        except GenerationFailure as e:
            e.user_id = user_id
            raise
        except Exception as e:
            raise GenerationFailure(
                f"Briefing generation failed: {type(e).__name__}",
                kind=GenerationFailure.TRANSPORT,
                user_id=user_id,
            ) from e

        try:
            self.notifier.send(config, html)
        except DeliveryFailure as e:
            e.user_id = user_id
            raise
        except Exception as e:
            raise DeliveryFailure(
                f"Briefing delivery failed: {type(e).__name__}", user_id=user_id
            ) from e

    def run(self, user_id: str) -> JobOutcome:
        """Run one job and report its terminal state instead of raising."""
        user_ref = redact(user_id)
        log_event("job.started", user=user_ref)

        try:
            with time_block("job.run.latency"):
                self.execute(user_id)
        except BriefingJobError as e:
            outcome = JobOutcome(user_id, JobStatus(e.outcome_status), e.stage, e.message)
            logger.warning(
                "Briefing job for %s failed at %s: %s", user_ref, outcome.stage, outcome.message
            )
        else:
            outcome = JobOutcome(user_id, JobStatus.SUCCESS, "done", "Briefing sent")
            logger.info("Briefing job for %s succeeded", user_ref)

        counter(f"job.{outcome.status.value}")
        log_event("job.finished", user=user_ref, status=outcome.status.value, stage=outcome.stage)
        return outcome

    def run_all(self, user_ids: Iterable[str] | None = None) -> dict[str, JobOutcome]:
        """
        Run independent jobs for many users.

        Args:
            user_ids: users to run; every stored user when None

        Returns:
            Mapping of user_id to outcome, one entry per user, never short-circuited
        """
        if user_ids is None:
            user_ids = self.store.list_user_ids()
        targets = list(dict.fromkeys(user_ids))
        if not targets:
            return {}

        outcomes: dict[str, JobOutcome] = {}
        workers = min(self.max_workers, len(targets))

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="briefing-job"
        ) as executor:
            future_to_user = {executor.submit(self.run, uid): uid for uid in targets}

            for future in concurrent.futures.as_completed(future_to_user):
                uid = future_to_user[future]
                try:
                    outcomes[uid] = future.result()
                except Exception as exc:
                    logger.exception("Briefing job for %s crashed", redact(uid))
                    counter("job.crashed")
                    outcomes[uid] = JobOutcome(
                        uid, JobStatus.ERROR, "job", f"Unexpected error: {type(exc).__name__}"
                    )

        # Report in request order
        ordered = {uid: outcomes[uid] for uid in targets}
        succeeded = sum(1 for outcome in ordered.values() if outcome.ok)
        log_event("job.batch.finished", total=len(ordered), succeeded=succeeded)
        return ordered

    def due_user_ids(
        self, now: datetime | None = None, window_minutes: int = SCHEDULE_WINDOW_MINUTES
    ) -> list[str]:
        now = now or reference_now()
        return [
            slot.user_id
            for slot in self.store.list_schedules()
            if is_due(slot.schedule_time, slot.schedule_frequency, now, window_minutes)
        ]

    def run_due(
        self, now: datetime | None = None, window_minutes: int = SCHEDULE_WINDOW_MINUTES
    ) -> dict[str, JobOutcome]:
        """Run jobs for every user whose schedule is due at now (the cron body)."""
        due = self.due_user_ids(now, window_minutes)
        logger.info("Scheduled trigger: %d user(s) due", len(due))
        return self.run_all(due)


_job: BriefingJob | None = None


def get_briefing_job() -> BriefingJob:
    """Get or create singleton BriefingJob wired to the database-backed store."""
    global _job
    if _job is None:
        from newsbrief.storage.config_repository import get_config_repository

        _job = BriefingJob(store=get_config_repository())
    return _job
