"""
Fallback Orchestrator
=====================
Detect-then-extract with an exhaustive retry across providers.

1. Use the caller's preferred provider, else detect one from the text
2. Extract with it; success = account number or service address found
3. Otherwise try every other provider in registration order until one succeeds
4. Nothing succeeded -> empty result with no provider
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from .detector import detect
from .models import ExtractionResult, LogSink, ProviderDefinition

if TYPE_CHECKING:
    from .registry import ProviderRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one document."""
    provider_id: Optional[str]
    provider_name: Optional[str]
    result: ExtractionResult = field(default_factory=ExtractionResult)
    attempted: Tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        return self.provider_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "provider_id": self.provider_id,
            "provider_name": self.provider_name,
            "attempted": list(self.attempted),
            "data": self.result.to_dict(),
        }


def _attempt(
    definition: ProviderDefinition,
    full_text: str,
    page_texts: Sequence[str],
    log_sink: Optional[LogSink],
) -> ExtractionResult:
    if log_sink is not None:
        log_sink(f"  Trying {definition.name}...")
    return definition.extract(full_text, page_texts, log_sink)


def resolve(
    full_text: Optional[str],
    page_texts: Optional[Sequence[str]],
    preferred_provider_id: Optional[str] = None,
    registry: Optional[ProviderRegistry] = None,
    log_sink: Optional[LogSink] = None,
) -> Resolution:
    """
    Resolve the provider for a document and extract its fields.

    Args:
        full_text: Text of all pages
        page_texts: Per-page text, index 0 = first page
        preferred_provider_id: Skip detection and try this provider first
        registry: ProviderRegistry (default: the process-wide registry)
        log_sink: Optional line-based debug log

    Returns:
        Resolution naming the provider whose rules succeeded, or an empty
        Resolution when none did
    """
    if registry is None:
        from .registry import get_default_registry
        registry = get_default_registry()

    full_text = full_text or ""
    page_texts = list(page_texts or [])
    attempted: List[str] = []

    first: Optional[ProviderDefinition] = None
    if preferred_provider_id:
        first = registry.get(preferred_provider_id)
        if first is None:
            logger.warning(f"Unknown preferred provider {preferred_provider_id!r}, falling back to all providers")
            if log_sink is not None:
                log_sink(f"  Unknown provider '{preferred_provider_id}', trying all providers...")
    else:
        first = registry.get(detect(full_text, registry, log_sink))

    if first is not None:
        attempted.append(first.id)
        result = _attempt(first, full_text, page_texts, log_sink)
        if result.has_identity():
            return Resolution(first.id, first.name, result, tuple(attempted))
        logger.info(f"{first.name} rules found no account number or address, trying other providers")

    for definition in registry:
        if first is not None and definition.id == first.id:
            continue
        attempted.append(definition.id)
        result = _attempt(definition, full_text, page_texts, log_sink)
        if result.has_identity():
            logger.info(f"Fallback provider {definition.name} succeeded")
            return Resolution(definition.id, definition.name, result, tuple(attempted))

    logger.info(f"No provider produced an account number or address (tried {', '.join(attempted)})")
    if log_sink is not None:
        log_sink("  No provider matched this document")
    return Resolution(None, None, ExtractionResult(), tuple(attempted))
