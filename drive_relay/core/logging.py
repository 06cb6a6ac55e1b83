"""
Logging setup shared by the HTTP layer and the Drive client.
"""

import logging
import sys

_NOISY_LOGGERS = ("googleapiclient.discovery_cache", "googleapiclient.discovery")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging and keep the Google client libraries quiet."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging"]
