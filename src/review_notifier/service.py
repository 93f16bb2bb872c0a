from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from review_notifier.config import AppIdSettings, FetchSettings
from review_notifier.gate import apply_output_cap, decide, dispatch
from review_notifier.models import AppDescriptor, Platform, ReviewRecord
from review_notifier.normalizers import ParseError, normalizer_for
from review_notifier.notifiers import Notifier
from review_notifier.store import PersistenceError, Store
from review_notifier.transport import Fetcher, TokenError, TokenProvider, TransportError
from review_notifier.utils.url_utils import (
    build_android_reviews_url,
    build_ios_feed_url,
    build_play_store_url,
    resolve_language,
)

logger = logging.getLogger(__name__)

PLATFORM_ORDER = (Platform.IOS, Platform.ANDROID)


@dataclass(frozen=True, slots=True)
class PollSession:
    """State carried from one poll cycle to the next.

    Suppression only ever applies to the first cycle; ``advance`` clears it for
    good whatever the outcome of that cycle.
    """

    suppress_first_run: bool
    cycle: int = 1

    @classmethod
    def start(cls, first_time_ignore: bool) -> PollSession:
        return cls(suppress_first_run=first_time_ignore, cycle=1)

    def advance(self) -> PollSession:
        return PollSession(suppress_first_run=False, cycle=self.cycle + 1)


@dataclass(slots=True)
class ReviewOutcome:
    review: ReviewRecord
    inserted: bool
    forwarded: ReviewRecord | None = None
    error: str | None = None


@dataclass(slots=True)
class AppResult:
    platform: Platform
    app_id: str
    fetched: int = 0
    inserted: int = 0
    suppressed: int = 0
    notified: int = 0
    failed: bool = False
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class CycleStats:
    session: PollSession
    next_session: PollSession
    apps: list[AppResult] = field(default_factory=list)

    @property
    def fetched(self) -> int:
        return sum(app.fetched for app in self.apps)

    @property
    def inserted(self) -> int:
        return sum(app.inserted for app in self.apps)

    @property
    def suppressed(self) -> int:
        return sum(app.suppressed for app in self.apps)

    @property
    def notified(self) -> int:
        return sum(app.notified for app in self.apps)

    @property
    def failed_apps(self) -> int:
        return sum(1 for app in self.apps if app.failed)

    @property
    def errors(self) -> list[str]:
        return [error for app in self.apps for error in app.errors]

    @property
    def ok(self) -> bool:
        return not self.errors


class ReviewIngestionService:
    def __init__(
        self,
        *,
        store: Store,
        fetcher: Fetcher,
        token_provider: TokenProvider,
        notifiers: list[Notifier],
        app_ids: AppIdSettings,
        accept_language: str,
        outputs: int = -1,
        fetch_settings: FetchSettings | None = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.token_provider = token_provider
        self.notifiers = notifiers
        self.app_ids = app_ids
        self.language, self.country = resolve_language(accept_language)
        self.outputs = outputs
        self.fetch_settings = fetch_settings or FetchSettings()

    def run_cycle(self, session: PollSession) -> CycleStats:
        stats = CycleStats(session=session, next_session=session.advance())
        jobs = [
            (platform, app_id)
            for platform in PLATFORM_ORDER
            for app_id in self.app_ids.for_platform(platform)
        ]
        if not jobs:
            logger.warning("No app IDs configured; nothing to poll")
            return stats

        if session.suppress_first_run:
            logger.info(
                "Cycle %d: first-run suppression active, new reviews are stored only",
                session.cycle,
            )

        workers = min(self.fetch_settings.max_workers, len(jobs))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="app") as executor:
            stats.apps = list(
                executor.map(lambda job: self._run_app(job[0], job[1], session), jobs)
            )
        return stats

    def build_descriptor(self, platform: Platform, app_id: str) -> AppDescriptor:
        if platform is Platform.ANDROID:
            return AppDescriptor(
                platform=platform,
                app_id=app_id,
                display_name=f"Android {app_id}",
                store_url=build_play_store_url(
                    self.fetch_settings.play_store_base_url,
                    app_id,
                    self.language,
                ),
            )
        return AppDescriptor(platform=platform, app_id=app_id)

    def review_url(self, app: AppDescriptor) -> str:
        if app.platform is Platform.ANDROID:
            return build_android_reviews_url(
                self.fetch_settings.android_api_base_url,
                app.app_id,
                self.token_provider.get_token(),
            )
        return build_ios_feed_url(self.fetch_settings.ios_base_url, self.country, app.app_id)

    def _run_app(self, platform: Platform, app_id: str, session: PollSession) -> AppResult:
        result = AppResult(platform=platform, app_id=app_id)
        try:
            self._process_app(result, session)
        except Exception as exc:  # noqa: BLE001
            _fail(result, f"{platform.value} app {app_id} failed unexpectedly: {exc}")
        return result

    def _process_app(self, result: AppResult, session: PollSession) -> None:
        app = self.build_descriptor(result.platform, result.app_id)
        label = f"{app.platform.value} app {app.app_id}"

        try:
            payload = self.fetcher.fetch(self.review_url(app))
        except (TransportError, TokenError) as exc:
            _fail(result, f"{label} fetch failed: {exc}")
            return

        try:
            reviews = normalizer_for(app.platform).normalize(payload, app)
        except ParseError as exc:
            _fail(result, f"{label} payload could not be parsed: {exc}")
            return

        result.fetched = len(reviews)
        logger.info("%s (%s) returned %d reviews", label, app.label, len(reviews))

        outcomes = self._dedupe_reviews(app, reviews, session)
        eligible: list[ReviewRecord] = []
        for outcome in outcomes:
            if outcome.error:
                result.errors.append(outcome.error)
                continue
            if outcome.inserted:
                result.inserted += 1
            if outcome.forwarded is not None:
                eligible.append(outcome.forwarded)
            elif outcome.inserted:
                result.suppressed += 1

        forwarded = apply_output_cap(eligible, self.outputs)
        if len(forwarded) < len(eligible):
            logger.info(
                "%s: output cap %d dropped %d review(s)",
                label,
                self.outputs,
                len(eligible) - len(forwarded),
            )

        result.errors.extend(dispatch(app, forwarded, self.notifiers))
        result.notified = len(forwarded)

    def _dedupe_reviews(
        self,
        app: AppDescriptor,
        reviews: list[ReviewRecord],
        session: PollSession,
    ) -> list[ReviewOutcome]:
        if not reviews:
            return []

        workers = min(self.fetch_settings.review_workers, len(reviews))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="review") as executor:
            # map keeps upstream (most recent first) order
            return list(
                executor.map(lambda review: self._dedupe_review(app, review, session), reviews)
            )

    def _dedupe_review(
        self,
        app: AppDescriptor,
        review: ReviewRecord,
        session: PollSession,
    ) -> ReviewOutcome:
        try:
            inserted = self.store.insert_if_absent(app, review)
        except PersistenceError as exc:
            message = f"dedupe failed for {app.platform.value} review {review.review_id}: {exc}"
            logger.exception(message)
            return ReviewOutcome(review=review, inserted=False, error=message)

        return ReviewOutcome(
            review=review,
            inserted=inserted,
            forwarded=decide(
                review,
                inserted=inserted,
                suppress_first_run=session.suppress_first_run,
            ),
        )


def _fail(result: AppResult, message: str) -> None:
    logger.exception(message)
    result.failed = True
    result.errors.append(message)
