from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from review_notifier.models import AppDescriptor, ReviewRecord

from .base import Notifier, render_review_text

logger = logging.getLogger(__name__)


class EmailNotifier(Notifier):
    name = "email"

    def __init__(
        self,
        *,
        smtp_host: str,
        smtp_port: int,
        from_address: str,
        to_addresses: list[str],
        use_tls: bool = True,
        username: str | None = None,
        password: str | None = None,
        subject_prefix: str = "[review-notifier]",
        timeout_seconds: int = 30,
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.from_address = from_address
        self.to_addresses = to_addresses
        self.use_tls = use_tls
        self.username = username
        self.password = password
        self.subject_prefix = subject_prefix
        self.timeout_seconds = timeout_seconds

    def send(self, app: AppDescriptor, reviews: list[ReviewRecord]) -> None:
        if not reviews:
            return

        message = build_email_message(
            app,
            reviews,
            from_address=self.from_address,
            to_addresses=self.to_addresses,
            subject_prefix=self.subject_prefix,
        )

        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout_seconds) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(message)
        logger.info("Emailed %d %s review(s) for %s", len(reviews), app.platform.value, app.label)


def build_email_message(
    app: AppDescriptor,
    reviews: list[ReviewRecord],
    *,
    from_address: str,
    to_addresses: list[str],
    subject_prefix: str,
) -> EmailMessage:
    subject = f"{app.label} ({app.platform.value}): {len(reviews)} new review(s)"
    if subject_prefix:
        subject = f"{subject_prefix} {subject}"

    sections = [render_review_text(app, review) for review in reviews]
    body = "\n\n".join(sections)
    if app.store_url:
        body = f"{body}\n\n{app.store_url}"

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = from_address
    message["To"] = ", ".join(to_addresses)
    message.set_content(body)
    return message
