"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this only wires the
root handler once for scripts and embedding applications.
"""

import logging
from typing import Optional

from cryptosignal.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging from settings (or an explicit level)."""
    log_level = (level or settings.log_level).upper()
    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    # Third-party HTTP clients are chatty at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
