"""
Utility Bill Parser - Flask Backend
===================================

OVERVIEW:
Extracts service address, account / point-of-delivery ids, usage (kWh) and
supply charges from utility bill PDFs. Each supported utility (ACE, PSE&G)
is a provider with its own detect patterns and rule cascades; see
bill_parser/providers/.

API ENDPOINTS:
- GET  /api/providers    - Registered providers in detection order
- POST /api/parse/text   - Extract from already-decoded text (JSON)
- POST /api/parse        - Extract from uploaded PDFs (multipart "files")
- POST /api/export       - Same as /api/parse, returned as an .xlsx workbook
- GET  /health           - Health check

KNOWN LIMITATIONS:
- Processing is synchronous; large batches block the request
- Only the providers in BUILTIN_PROVIDERS are supported
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Flask
from flask_cors import CORS

from config_loader import get_config
from logging_setup import init_request_logging, setup_logging

logger = logging.getLogger(__name__)


def create_app(cfg: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Build the Flask app.

    Args:
        cfg: Config dict (default: config.yml + env overrides)
    """
    cfg = cfg if cfg is not None else get_config()
    setup_logging(cfg)

    app = Flask(__name__, static_folder=None)
    app.config["APP_CFG"] = cfg

    max_mb = (cfg.get("uploads", {}) or {}).get("max_content_mb")
    if max_mb:
        app.config["MAX_CONTENT_LENGTH"] = int(max_mb) * 1024 * 1024

    origins = ((cfg.get("app", {}) or {}).get("cors", {}) or {}).get("origins") or "*"
    CORS(app, origins=origins)

    init_request_logging(app)

    from routes.parse_api import parse_api_bp
    from routes.spa import spa_bp

    app.register_blueprint(parse_api_bp)
    app.register_blueprint(spa_bp)

    logger.info("Bill parser app initialized")
    return app
