"""
Central logging setup.

- Uses stdlib logging (no external deps)
- The extraction core logs under ``bill_parser.*``; its level can be set apart
  from the root level (``logging.core_level``) since rule-by-rule matches are
  logged at DEBUG
"""

from __future__ import annotations

import logging
import logging.config
import time
import uuid
from typing import Any, Dict, Optional

from flask import Flask, g, request

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def build_logging_config(cfg: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    cfg = cfg or {}
    log_cfg = cfg.get("logging", {}) if isinstance(cfg, dict) else {}
    level = str(log_cfg.get("level", "INFO")).upper()
    core_level = str(log_cfg.get("core_level") or level).upper()
    fmt = str(log_cfg.get("format", DEFAULT_FORMAT))

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": fmt}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            }
        },
        "loggers": {"bill_parser": {"level": core_level}},
        "root": {"handlers": ["console"], "level": level},
    }


def setup_logging(cfg: Optional[Dict[str, Any]] = None) -> None:
    logging.config.dictConfig(build_logging_config(cfg))


def init_request_logging(app: Flask) -> None:
    logger = logging.getLogger("http")

    @app.before_request
    def _start_request_timer() -> None:
        g._request_start = time.time()
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())

    @app.after_request
    def _log_request(response):  # type: ignore[no-untyped-def]
        start = getattr(g, "_request_start", None)
        dur_ms = None if start is None else round((time.time() - start) * 1000, 2)
        logger.info(
            "%s %s status=%s dur_ms=%s provider=%s request_id=%s",
            request.method,
            request.path,
            response.status_code,
            dur_ms,
            getattr(g, "provider_id", None),
            getattr(g, "request_id", None),
        )

        response.headers["X-Request-Id"] = getattr(g, "request_id", "")
        return response
