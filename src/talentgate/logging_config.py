from __future__ import annotations

import logging

from talentgate.config import get_settings

# Libraries that are chatty at INFO/DEBUG (SQL echo, multipart parsing, HTTP pools).
QUIET_LOGGERS = ("sqlalchemy.engine", "multipart", "urllib3")

_LOG_CONFIGURED = False


def configure_logging() -> None:
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=f"%(asctime)s %(levelname)s {settings.app_env} [%(name)s] %(message)s",
    )
    logging.getLogger("talentgate").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    _LOG_CONFIGURED = True
