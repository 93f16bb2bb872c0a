from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from pathlib import Path

from review_notifier.models import AppDescriptor, Platform, ReviewRecord
from review_notifier.utils.datetime_utils import utc_now_iso

from .base import PersistenceError, Store, StoredReview

logger = logging.getLogger(__name__)


class SQLiteStore(Store):
    """Flat ``review`` table keyed by ``(id, kind)``.

    A fresh connection is opened per operation so worker threads never share
    one. The primary key turns a lost check-then-insert race into a no-op
    insert, which is reported as "already stored".
    """

    def __init__(self, db_path: str, timeout_seconds: float = 30.0) -> None:
        self.db_path = Path(db_path)
        self.timeout_seconds = timeout_seconds

    def init_db(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS review (
                    id TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    app_name TEXT NOT NULL,
                    title TEXT NOT NULL,
                    message TEXT NOT NULL,
                    rating INTEGER NOT NULL,
                    updated TEXT NOT NULL,
                    version TEXT NOT NULL,
                    create_date TEXT NOT NULL,
                    PRIMARY KEY (id, kind)
                )
                """
            )
            connection.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_review_create_date
                ON review (create_date)
                """
            )
            connection.commit()

    def exists(self, review_id: str, platform: Platform) -> int:
        try:
            with closing(self._connect()) as connection:
                row = connection.execute(
                    "SELECT count(*) AS cnt FROM review WHERE id = ? AND kind = ?",
                    (review_id, platform.value),
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"existence check failed for {platform.value} review {review_id}: {exc}"
            ) from exc
        return int(row["cnt"])

    def insert_if_absent(self, app: AppDescriptor, review: ReviewRecord) -> bool:
        if self.exists(review.review_id, app.platform) > 0:
            return False

        try:
            with closing(self._connect()) as connection:
                cursor = connection.execute(
                    """
                    INSERT INTO review (
                        id,
                        kind,
                        app_name,
                        title,
                        message,
                        rating,
                        updated,
                        version,
                        create_date
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id, kind) DO NOTHING
                    """,
                    (
                        review.review_id,
                        app.platform.value,
                        app.label,
                        review.title,
                        review.message,
                        review.rating,
                        review.updated_at,
                        review.version,
                        utc_now_iso(),
                    ),
                )
                connection.commit()
        except sqlite3.Error as exc:
            # The review was absent a moment ago, so it stays new even though
            # the row may not have been written.
            logger.error(
                "failed to insert %s review %s for %s: %s",
                app.platform.value,
                review.review_id,
                app.app_id,
                exc,
            )
            return True

        if cursor.rowcount == 0:
            logger.info(
                "%s review %s was stored concurrently; treating as already seen",
                app.platform.value,
                review.review_id,
            )
            return False
        return True

    def get(self, review_id: str, platform: Platform) -> StoredReview | None:
        try:
            with closing(self._connect()) as connection:
                row = connection.execute(
                    """
                    SELECT id, kind, app_name, title, message, rating, updated, version, create_date
                    FROM review
                    WHERE id = ? AND kind = ?
                    """,
                    (review_id, platform.value),
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"read failed for {platform.value} review {review_id}: {exc}"
            ) from exc

        if row is None:
            return None

        return StoredReview(
            review_id=row["id"],
            kind=row["kind"],
            app_name=row["app_name"],
            title=row["title"],
            message=row["message"],
            rating=row["rating"],
            updated=row["updated"],
            version=row["version"],
            create_date=row["create_date"],
        )

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self.db_path, timeout=self.timeout_seconds)
        connection.row_factory = sqlite3.Row
        return connection
