from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=DATE_FORMAT, force=True)
    # urllib3 logs every connection at DEBUG and would echo the access token
    logging.getLogger("urllib3").setLevel(max(resolved, logging.INFO))
    logging.getLogger("apscheduler").setLevel(max(resolved, logging.INFO))
