from __future__ import annotations

import logging

from hireform.config import get_settings

# Per-part multipart parser chatter drowns out request logs at DEBUG.
_NOISY_LOGGERS = ("multipart", "python_multipart")

_log_configured = False


def configure_logging() -> None:
    global _log_configured
    if _log_configured:
        return

    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
    logging.getLogger(__name__).debug("Logging configured for %s (%s)", settings.app_name, settings.app_env)
    _log_configured = True
