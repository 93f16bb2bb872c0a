from __future__ import annotations

import logging

import requests

from review_notifier.models import AppDescriptor, ReviewRecord

from .base import Notifier, render_review_footer, render_stars

logger = logging.getLogger(__name__)

# Slack caps a message at 50 blocks; two blocks per review plus a header.
MAX_REVIEWS_PER_MESSAGE = 20
_MAX_SECTION_CHARS = 2900


class SlackWebhookNotifier(Notifier):
    name = "slack"

    def __init__(
        self,
        webhook_url: str,
        timeout_seconds: int = 15,
        *,
        channel: str | None = None,
        username: str | None = None,
        icon_emoji: str | None = None,
    ) -> None:
        self.webhook_url = webhook_url
        self.timeout_seconds = timeout_seconds
        self.channel = channel
        self.username = username
        self.icon_emoji = icon_emoji

    def send(self, app: AppDescriptor, reviews: list[ReviewRecord]) -> None:
        if not reviews:
            return

        for start in range(0, len(reviews), MAX_REVIEWS_PER_MESSAGE):
            chunk = reviews[start : start + MAX_REVIEWS_PER_MESSAGE]
            payload = build_slack_payload(app, chunk)
            if self.channel:
                payload["channel"] = self.channel
            if self.username:
                payload["username"] = self.username
            if self.icon_emoji:
                payload["icon_emoji"] = self.icon_emoji

            response = requests.post(
                self.webhook_url,
                json=payload,
                timeout=self.timeout_seconds,
            )
            if response.status_code >= 400:
                raise RuntimeError(
                    f"Slack webhook returned {response.status_code}: {response.text}"
                )
        logger.info(
            "Posted %d %s review(s) for %s to Slack",
            len(reviews),
            app.platform.value,
            app.label,
        )


def build_slack_payload(app: AppDescriptor, reviews: list[ReviewRecord]) -> dict:
    app_link = f"*<{app.store_url}|{app.label}>*" if app.store_url else f"*{app.label}*"
    header = f"{app_link} ({app.platform.value}): {len(reviews)} new review(s)"

    blocks: list[dict] = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": header,
            },
        }
    ]
    for review in reviews:
        blocks.append({"type": "divider"})
        blocks.append(
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": _review_section_text(app, review),
                },
            }
        )

    return {
        "text": f"{app.label} ({app.platform.value}): {len(reviews)} new review(s)",
        "blocks": blocks,
    }


def render_slack_message_text(app: AppDescriptor, reviews: list[ReviewRecord]) -> str:
    payload = build_slack_payload(app, reviews)
    lines: list[str] = []

    top_text = payload.get("text")
    if isinstance(top_text, str) and top_text:
        lines.append(top_text)

    for block in payload["blocks"]:
        text = block.get("text")
        if isinstance(text, dict) and text.get("text"):
            lines.append(text["text"])

    return "\n".join(lines)


def _review_section_text(app: AppDescriptor, review: ReviewRecord) -> str:
    message = review.message or "(no review text)"
    body = "\n".join(
        [
            f"{render_stars(review.rating)} *{review.title}*",
            message,
            f"_{render_review_footer(app, review)}_",
        ]
    )
    if len(body) > _MAX_SECTION_CHARS:
        body = f"{body[: _MAX_SECTION_CHARS - 3]}..."
    return body
