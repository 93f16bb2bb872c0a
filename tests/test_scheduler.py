from __future__ import annotations

from apscheduler.schedulers.blocking import BlockingScheduler

from review_notifier.config import parse_config
from review_notifier.scheduler import REVIEW_JOB_ID, TOKEN_JOB_ID, ReviewCycleJob, build_scheduler
from review_notifier.service import CycleStats, PollSession


class _RecordingService:
    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.sessions: list[PollSession] = []
        self.fail_on = fail_on or set()

    def run_cycle(self, session: PollSession) -> CycleStats:
        self.sessions.append(session)
        if session.cycle in self.fail_on:
            raise RuntimeError("boom")
        return CycleStats(session=session, next_session=session.advance())


def test_suppression_is_cleared_after_first_cycle_even_when_it_fails() -> None:
    service = _RecordingService(fail_on={1})
    job = ReviewCycleJob(service, first_time_ignore=True)

    assert job() is None
    assert job() is not None
    job()

    assert [session.suppress_first_run for session in service.sessions] == [True, False, False]
    assert [session.cycle for session in service.sessions] == [1, 2, 3]


def test_scheduler_registers_review_and_token_jobs() -> None:
    config = parse_config(
        {
            "schedule": {"cron": "*/5 * * * *", "timezone": "Asia/Tokyo"},
            "token": {"refresh_command": "shell/refresh_token.sh", "refresh_interval_minutes": 30},
        }
    )

    scheduler = build_scheduler(config, lambda: None, scheduler=BlockingScheduler())

    assert sorted(job.id for job in scheduler.get_jobs()) == [REVIEW_JOB_ID, TOKEN_JOB_ID]


def test_invalid_cron_only_drops_review_job() -> None:
    config = parse_config(
        {
            "schedule": {"cron": "every now and then"},
            "token": {"refresh_command": "shell/refresh_token.sh"},
        }
    )

    scheduler = build_scheduler(config, lambda: None, scheduler=BlockingScheduler())

    assert [job.id for job in scheduler.get_jobs()] == [TOKEN_JOB_ID]


def test_token_job_is_optional() -> None:
    scheduler = build_scheduler(parse_config({}), lambda: None, scheduler=BlockingScheduler())

    assert [job.id for job in scheduler.get_jobs()] == [REVIEW_JOB_ID]
