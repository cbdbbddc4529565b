from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once per process.

    Every module logs through `logging.getLogger(__name__)`; this only decides
    where records go and at which level.
    """
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # httpx logs every request at INFO; keep provider calls quiet unless debugging.
    logging.getLogger("httpx").setLevel(logging.WARNING)
