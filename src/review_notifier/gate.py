from __future__ import annotations

import logging

from review_notifier.models import AppDescriptor, NotificationDecision, ReviewRecord
from review_notifier.notifiers import Notifier

logger = logging.getLogger(__name__)


def evaluate(*, inserted: bool, suppress_first_run: bool) -> NotificationDecision:
    return NotificationDecision(eligible=inserted and not suppress_first_run)


def decide(
    review: ReviewRecord,
    *,
    inserted: bool,
    suppress_first_run: bool,
) -> ReviewRecord | None:
    """Return the review when it should be forwarded, otherwise None."""
    decision = evaluate(inserted=inserted, suppress_first_run=suppress_first_run)
    return review if decision.eligible else None


def apply_output_cap(reviews: list[ReviewRecord], outputs: int) -> list[ReviewRecord]:
    """Keep the first ``outputs`` reviews in upstream order; negative means unlimited."""
    if outputs < 0 or len(reviews) <= outputs:
        return list(reviews)
    return list(reviews[:outputs])


def dispatch(
    app: AppDescriptor,
    reviews: list[ReviewRecord],
    notifiers: list[Notifier],
) -> list[str]:
    """Hand the final review list to every channel; return per-channel failures.

    Channels are invoked even with an empty list and are expected to no-op.
    """
    failures: list[str] = []
    for notifier in notifiers:
        try:
            notifier.send(app, reviews)
        except Exception as exc:  # noqa: BLE001
            message = (
                f"{notifier.name} notification failed for "
                f"{app.platform.value} {app.app_id}: {exc}"
            )
            logger.exception(message)
            failures.append(message)
    return failures
