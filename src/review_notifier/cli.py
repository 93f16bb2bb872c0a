from __future__ import annotations

import argparse
import logging
import os
import sys

from review_notifier.config import AppConfig, ConfigError, load_config
from review_notifier.logging_config import setup_logging
from review_notifier.notifiers import EmailNotifier, Notifier, SlackWebhookNotifier
from review_notifier.scheduler import ReviewCycleJob, build_scheduler, log_cycle_summary
from review_notifier.service import PollSession, ReviewIngestionService
from review_notifier.store import SQLiteStore
from review_notifier.transport import FileTokenProvider, HttpFetcher, refresh_token

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="review-notifier",
        description="Poll App Store and Google Play reviews and forward new ones to Slack/email.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to config YAML file (default: config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        help="Override config log level (e.g. INFO, DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("run", help="Poll once and notify new reviews")
    subparsers.add_parser("serve", help="Poll on the configured schedule until interrupted")
    subparsers.add_parser("init-db", help="Initialize SQLite schema")
    subparsers.add_parser("refresh-token", help="Run the token refresh command once")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = load_config(args.config)
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2

    log_level = args.log_level or app_config.log_level
    setup_logging(log_level)

    if args.command == "refresh-token":
        if not app_config.token.refresh_command:
            logger.error("token.refresh_command is not configured")
            return 2
        return 0 if refresh_token(app_config.token.refresh_command) else 1

    try:
        store = _build_store(app_config)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    store.init_db()
    if args.command == "init-db":
        logger.info("Initialized SQLite database at %s", app_config.storage.path)
        return 0

    try:
        notifiers = _build_notifiers(app_config)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    service = ReviewIngestionService(
        store=store,
        fetcher=HttpFetcher(timeout_seconds=app_config.fetch.timeout_seconds),
        token_provider=FileTokenProvider(app_config.token.path),
        notifiers=notifiers,
        app_ids=app_config.app_ids,
        accept_language=app_config.accept_language,
        outputs=app_config.outputs,
        fetch_settings=app_config.fetch,
    )

    if args.command == "serve":
        return _serve(app_config, service)

    stats = service.run_cycle(PollSession.start(app_config.first_time_ignore))
    log_cycle_summary(stats)
    return 0 if stats.ok else 1


def _build_store(app_config: AppConfig) -> SQLiteStore:
    if app_config.storage.type != "sqlite":
        raise ConfigError(f"Unsupported storage type: {app_config.storage.type}")
    return SQLiteStore(app_config.storage.path)


def _build_notifiers(app_config: AppConfig) -> list[Notifier]:
    notifiers: list[Notifier] = []

    if app_config.slack.use:
        webhook_url = os.getenv(app_config.slack.webhook_env_var, "").strip()
        if not webhook_url:
            raise ConfigError(
                f"Missing Slack webhook URL in environment variable "
                f"{app_config.slack.webhook_env_var}"
            )
        notifiers.append(
            SlackWebhookNotifier(
                webhook_url=webhook_url,
                channel=app_config.slack.channel,
                username=app_config.slack.username,
                icon_emoji=app_config.slack.icon_emoji,
            )
        )

    if app_config.email.use:
        email = app_config.email
        notifiers.append(
            EmailNotifier(
                smtp_host=email.smtp_host,
                smtp_port=email.smtp_port,
                from_address=email.from_address,
                to_addresses=email.to_addresses,
                use_tls=email.use_tls,
                username=email.username,
                password=os.getenv(email.password_env_var),
                subject_prefix=email.subject_prefix,
            )
        )

    if not notifiers:
        logger.warning("No notification channel enabled; new reviews will only be stored")
    return notifiers


def _serve(app_config: AppConfig, service: ReviewIngestionService) -> int:
    job = ReviewCycleJob(service, first_time_ignore=app_config.first_time_ignore)
    scheduler = build_scheduler(app_config, job)
    if not scheduler.get_jobs():
        logger.error("No job could be scheduled; check schedule.cron and token settings")
        return 2

    logger.info("Scheduler starting (timezone %s)", app_config.schedule.timezone)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
