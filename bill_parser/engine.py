"""
Extraction Engine
=================
Runs a provider's field cascades against document text.

For every field the provider declares, rules are tried in order against their
scope (first page or full text) and the first rule yielding a non-empty value
wins. Fields without a match stay None; sentinel fields bypass the rules.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Optional, Sequence

from .address import normalize_address
from .models import (
    FIELD_LABELS,
    ExtractionResult,
    ExtractionRule,
    LogSink,
    ProviderDefinition,
    Scope,
)
from .transforms import AddressNormalizer

if TYPE_CHECKING:
    from .registry import ProviderRegistry

logger = logging.getLogger(__name__)


def _scope_text(rule: ExtractionRule, full_text: str, page_texts: Sequence[str]) -> Optional[str]:
    if rule.scope is Scope.FIRST_PAGE_TEXT:
        return page_texts[0] if page_texts else None
    return full_text


def evaluate_cascade(
    rules: Sequence[ExtractionRule],
    full_text: str,
    page_texts: Sequence[str],
    address_normalizer: Optional[AddressNormalizer] = normalize_address,
) -> Optional[str]:
    """Return the value of the first rule that fires, or None."""
    for position, rule in enumerate(rules, start=1):
        value = rule.apply(_scope_text(rule, full_text, page_texts), address_normalizer)
        if value:
            logger.debug(f"Rule {position}/{len(rules)} matched: {rule.pattern}")
            return value
    return None


def run_cascades(
    definition: ProviderDefinition,
    full_text: Optional[str],
    page_texts: Optional[Sequence[str]],
    log_sink: Optional[LogSink] = None,
    address_normalizer: Optional[AddressNormalizer] = normalize_address,
) -> ExtractionResult:
    """Evaluate every field of ``definition``. Never raises on bad input."""
    full_text = full_text or ""
    page_texts = [p or "" for p in (page_texts or [])]

    values: Dict[str, Optional[str]] = {}
    for field_name, rules in definition.field_rules.items():
        if field_name in definition.sentinels:
            continue
        values[field_name] = evaluate_cascade(rules, full_text, page_texts, address_normalizer)
    values.update(definition.sentinels)

    result = ExtractionResult(**values)

    if log_sink is not None:
        declared = list(definition.field_rules) + [
            f for f in definition.sentinels if f not in definition.field_rules
        ]
        for field_name in declared:
            log_sink(f"  {FIELD_LABELS[field_name]}: {getattr(result, field_name) or 'N/A'}")

    logger.debug(f"{definition.name} extraction: {result.to_dict()}")
    return result


def extract(
    provider_id: str,
    full_text: Optional[str],
    page_texts: Optional[Sequence[str]],
    registry: Optional[ProviderRegistry] = None,
    log_sink: Optional[LogSink] = None,
    address_normalizer: Optional[AddressNormalizer] = normalize_address,
) -> ExtractionResult:
    """
    Extract fields using the provider registered as ``provider_id``.

    Args:
        provider_id: Registered provider id
        full_text: Text of all pages
        page_texts: Per-page text, index 0 = first page
        registry: ProviderRegistry (default: the process-wide registry)
        log_sink: Optional line-based debug log
        address_normalizer: Applied wherever an address rule fires

    Raises:
        UnknownProviderError: ``provider_id`` is not registered
    """
    if registry is None:
        from .registry import get_default_registry
        registry = get_default_registry()

    definition = registry.require(provider_id)
    return definition.extract(full_text, page_texts, log_sink, address_normalizer)
