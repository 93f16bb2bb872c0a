"""Periodic triggers: the review poll cycle and the API token refresh.

Both run on one APScheduler ``BlockingScheduler`` but are independent jobs; a
bad cron pattern only disables the job it belongs to.
"""

from __future__ import annotations

import logging
from typing import Callable

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from review_notifier.config import AppConfig
from review_notifier.service import CycleStats, PollSession, ReviewIngestionService
from review_notifier.transport import refresh_token

logger = logging.getLogger(__name__)

REVIEW_JOB_ID = "review_cycle"
TOKEN_JOB_ID = "token_refresh"


class ReviewCycleJob:
    """Owns the poll session between scheduled cycles."""

    def __init__(self, service: ReviewIngestionService, first_time_ignore: bool) -> None:
        self.service = service
        self.session = PollSession.start(first_time_ignore)

    def __call__(self) -> CycleStats | None:
        session = self.session
        try:
            stats = self.service.run_cycle(session)
        except Exception:  # noqa: BLE001
            logger.exception("review cycle %d failed", session.cycle)
            return None
        finally:
            self.session = session.advance()

        log_cycle_summary(stats)
        return stats


def log_cycle_summary(stats: CycleStats) -> None:
    logger.info(
        "Cycle %d complete | apps=%d failed_apps=%d fetched=%d inserted=%d "
        "suppressed=%d notified=%d errors=%d",
        stats.session.cycle,
        len(stats.apps),
        stats.failed_apps,
        stats.fetched,
        stats.inserted,
        stats.suppressed,
        stats.notified,
        len(stats.errors),
    )


def build_scheduler(
    app_config: AppConfig,
    review_job: Callable[[], object],
    *,
    scheduler: BlockingScheduler | None = None,
) -> BlockingScheduler:
    scheduler = scheduler or BlockingScheduler(timezone=app_config.schedule.timezone)

    try:
        trigger = CronTrigger.from_crontab(
            app_config.schedule.cron,
            timezone=app_config.schedule.timezone,
        )
    except ValueError as exc:
        logger.error("cron pattern %r not valid: %s", app_config.schedule.cron, exc)
    else:
        scheduler.add_job(
            review_job,
            trigger,
            id=REVIEW_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info("Review cycle scheduled with cron %r", app_config.schedule.cron)

    command = app_config.token.refresh_command
    if command:
        scheduler.add_job(
            refresh_token,
            "interval",
            args=[command],
            minutes=app_config.token.refresh_interval_minutes,
            id=TOKEN_JOB_ID,
            replace_existing=True,
            max_instances=1,
        )
        logger.info(
            "Token refresh scheduled every %d minute(s)",
            app_config.token.refresh_interval_minutes,
        )

    return scheduler
