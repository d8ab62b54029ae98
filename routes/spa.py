from __future__ import annotations

from flask import Blueprint, jsonify

from bill_parser import get_default_registry

spa_bp = Blueprint("spa", __name__)


@spa_bp.route("/health")
def health_check():
    """
    Health check endpoint for deployment monitoring.

    Builds the provider registry on first call so rule-table errors surface
    at deploy time rather than on the first upload.
    """
    return jsonify({"status": "ok", "service": "bill-parser", "providers": len(get_default_registry())}), 200
