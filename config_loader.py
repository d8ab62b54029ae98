"""
Simple YAML-backed configuration loader with environment-variable overrides.

Design goals:
- Minimal dependencies and minimal magic
- Safe defaults from config.yml
- Environment variables can override deployment-specific values (log level, OCR, limits)
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import yaml


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base (override wins)."""
    out: Dict[str, Any] = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _parse_bool(value: Optional[str], default: Optional[bool] = None) -> Optional[bool]:
    if value is None:
        return default
    v = value.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _env_override_dict() -> Dict[str, Any]:
    """
    Map env vars to config keys.
    Keep this small and explicit.
    """
    overrides: Dict[str, Any] = {}

    # Logging
    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        overrides = _deep_merge(overrides, {"logging": {"level": log_level}})

    # Default provider for requests that don't name one
    provider = os.getenv("BILL_PARSER_PROVIDER")
    if provider:
        overrides = _deep_merge(overrides, {"parser": {"preferred_provider": provider.strip()}})

    # OCR fallback for scanned PDFs
    ocr_enabled = _parse_bool(os.getenv("BILL_PARSER_OCR"))
    if ocr_enabled is not None:
        overrides = _deep_merge(overrides, {"documents": {"ocr_enabled": ocr_enabled}})

    max_files = _parse_int(os.getenv("BILL_PARSER_MAX_FILES"))
    if max_files is not None:
        overrides = _deep_merge(overrides, {"uploads": {"max_files": max_files}})

    # CORS origins (comma-separated)
    cors_origins = os.getenv("CORS_ORIGINS")
    if cors_origins:
        origins = [o.strip() for o in cors_origins.split(",") if o.strip()]
        overrides = _deep_merge(overrides, {"app": {"cors": {"origins": origins}}})

    return overrides


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load config.yml and apply environment overrides.
    """
    config_path = path or os.getenv("APP_CONFIG_PATH", "config.yml")
    if not os.path.exists(config_path):
        # Safe fallback: empty config; caller must handle defaults
        cfg: Dict[str, Any] = {}
    else:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}

    return _deep_merge(cfg, _env_override_dict())


_CONFIG_CACHE: Optional[Dict[str, Any]] = None


def get_config(path: Optional[str] = None, *, force_reload: bool = False) -> Dict[str, Any]:
    global _CONFIG_CACHE
    if _CONFIG_CACHE is None or force_reload:
        _CONFIG_CACHE = load_config(path)
    return _CONFIG_CACHE
