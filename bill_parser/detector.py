"""Provider detection from whole-document text."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .models import LogSink

if TYPE_CHECKING:
    from .registry import ProviderRegistry

logger = logging.getLogger(__name__)


def detect(
    full_text: Optional[str],
    registry: Optional[ProviderRegistry] = None,
    log_sink: Optional[LogSink] = None,
) -> Optional[str]:
    """
    Return the id of the first provider with a detect pattern in ``full_text``.

    Providers are checked in registration order and each provider's patterns
    in declaration order; the first hit wins. Returns None when nothing
    matches.
    """
    if registry is None:
        from .registry import get_default_registry
        registry = get_default_registry()

    if full_text:
        for definition in registry:
            pattern = definition.matches(full_text)
            if pattern is not None:
                logger.debug(f"Detected {definition.id} via {pattern!r}")
                if log_sink is not None:
                    log_sink(f"  Detected: {definition.name}")
                return definition.id

    logger.debug("No provider detected")
    if log_sink is not None:
        log_sink("  Could not detect utility type, trying all providers...")
    return None
