"""
logs.py

Per-component file loggers writing to OAUTH2_LOG_DIR/oauth2.log.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from __future__ import annotations

import logging

from oauth2_clients import config


def get_logger(component: str) -> logging.Logger:
    """
    Return the "oauth2.<component>" logger, attaching its file handler once.

    Args:
        component: Short component name shown in every record, e.g. "client".

    Returns:
        A configured logger that does not propagate to the root logger.

    Example:
        _log = get_logger("client")
        _log.info("Token refreshed for %s", name)
    """
    log = logging.getLogger(f"oauth2.{component}")
    if not log.handlers:
        config.LOGS_DIR.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(config.LOG_FILE, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter(f"[%(asctime)s] [%(levelname)s] [{component}] %(message)s")
        )
        log.addHandler(handler)
        log.setLevel(getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
        log.propagate = False
    return log
