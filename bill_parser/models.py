"""
Core data types for provider-based bill extraction.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields as dataclass_fields
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

from .address import normalize_address
from .transforms import AddressNormalizer, apply_transforms, is_known_transform

LogSink = Callable[[str], None]


class BillParserError(Exception):
    """Base class for structural errors in the extraction core."""


class DuplicateProviderId(BillParserError):
    """A provider with the same id is already registered."""

    def __init__(self, provider_id: str):
        super().__init__(f"Provider id already registered: {provider_id!r}")
        self.provider_id = provider_id


class RegistryFrozenError(BillParserError):
    """The registry no longer accepts registrations."""


class UnknownProviderError(BillParserError, KeyError):
    """No provider is registered under the requested id."""

    def __init__(self, provider_id: str):
        super().__init__(f"Unknown provider id: {provider_id!r}")
        self.provider_id = provider_id

    def __str__(self) -> str:
        return self.args[0]


class RuleDefinitionError(BillParserError):
    """A rule table references a missing capture group, transform or field."""


class Scope(Enum):
    """Which text a rule is matched against."""
    FULL_TEXT = "full_text"
    FIRST_PAGE_TEXT = "first_page_text"


GroupSelector = Union[int, Tuple[int, ...]]

LAST_GROUP = -1


@dataclass(frozen=True)
class ExtractionRule:
    """
    One step of a field cascade.

    ``group`` picks the capture group supplying the value. Negative numbers
    count from the last group (``LAST_GROUP``); a tuple joins several groups
    with a single space. ``post_process`` names transforms from
    ``bill_parser.transforms``.
    """
    pattern: str
    scope: Scope = Scope.FULL_TEXT
    group: GroupSelector = 1
    post_process: Tuple[str, ...] = ()
    flags: int = re.IGNORECASE
    compiled: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.pattern, self.flags)
        except re.error as e:
            raise RuleDefinitionError(f"Invalid pattern {self.pattern!r}: {e}") from e

        if compiled.groups < 1:
            raise RuleDefinitionError(f"Pattern has no capture group: {self.pattern!r}")

        selectors = self.group if isinstance(self.group, tuple) else (self.group,)
        if not selectors:
            raise RuleDefinitionError(f"Empty group selector for {self.pattern!r}")
        for index in selectors:
            if index == 0 or abs(index) > compiled.groups:
                raise RuleDefinitionError(
                    f"Group {index} does not exist in {self.pattern!r} "
                    f"({compiled.groups} group(s))"
                )

        for name in self.post_process:
            if not is_known_transform(name):
                raise RuleDefinitionError(f"Unknown post-process transform: {name!r}")

        object.__setattr__(self, "post_process", tuple(self.post_process))
        object.__setattr__(self, "compiled", compiled)

    def _resolve_group(self, index: int) -> int:
        return index if index > 0 else self.compiled.groups + 1 + index

    def apply(
        self,
        text: Optional[str],
        address_normalizer: Optional[AddressNormalizer] = None,
    ) -> Optional[str]:
        """Return the post-processed value, or None if the rule does not fire."""
        if not text:
            return None
        match = self.compiled.search(text)
        if not match:
            return None

        selectors = self.group if isinstance(self.group, tuple) else (self.group,)
        parts = [match.group(self._resolve_group(i)) for i in selectors]
        parts = [p for p in parts if p]
        if not parts:
            return None

        value = apply_transforms(" ".join(parts), self.post_process, address_normalizer)
        return value or None


@dataclass(frozen=True)
class ExtractionResult:
    """
    Fields extracted from one document.

    Each field is a string, a provider sentinel (e.g. "ACE Doesn't Supply Gas")
    or None when the field was not found.
    """
    service_address: Optional[str] = None
    account_number: Optional[str] = None
    gas_supply_charges: Optional[str] = None
    electric_supply_charges: Optional[str] = None
    total_usage_kwh: Optional[str] = None
    electric_pod_id: Optional[str] = None
    gas_pod_id: Optional[str] = None

    def has_identity(self) -> bool:
        """True when the account number or the service address was found."""
        return bool(self.account_number) or bool(self.service_address)

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in FIELDS)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {name: getattr(self, name) for name in FIELDS}


FIELDS: Tuple[str, ...] = tuple(f.name for f in dataclass_fields(ExtractionResult))

FIELD_LABELS: Dict[str, str] = {
    "service_address": "Service Address",
    "account_number": "Account Number",
    "gas_supply_charges": "Gas",
    "electric_supply_charges": "Electric",
    "total_usage_kwh": "Total Usage",
    "electric_pod_id": "PE PoD",
    "gas_pod_id": "PG PoD",
}


def _check_field(provider_id: str, name: str) -> None:
    if name not in FIELDS:
        raise RuleDefinitionError(f"Provider {provider_id!r} references unknown field {name!r}")


@dataclass(frozen=True)
class ProviderDefinition:
    """
    Rule set for one bill issuer.

    ``sentinels`` short-circuit a field to a fixed string (the issuer does not
    offer that service); rules declared for a sentinel field are never run.
    ``id_columns`` lists the (column label, field) pairs that identify a bill
    from this issuer in spreadsheet exports.
    """
    id: str
    name: str
    detect_patterns: Tuple[str, ...]
    field_rules: Mapping[str, Tuple[ExtractionRule, ...]]
    sentinels: Mapping[str, str] = field(default_factory=dict)
    id_columns: Tuple[Tuple[str, str], ...] = ()
    compiled_detect_patterns: Tuple["re.Pattern[str]", ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not self.id:
            raise RuleDefinitionError("Provider id must be a non-empty string")

        for name in list(self.field_rules) + list(self.sentinels):
            _check_field(self.id, name)
        for _label, name in self.id_columns:
            _check_field(self.id, name)

        try:
            compiled = tuple(re.compile(p, re.IGNORECASE) for p in self.detect_patterns)
        except re.error as e:
            raise RuleDefinitionError(f"Invalid detect pattern for {self.id!r}: {e}") from e

        object.__setattr__(self, "detect_patterns", tuple(self.detect_patterns))
        object.__setattr__(
            self, "field_rules", {k: tuple(v) for k, v in self.field_rules.items()}
        )
        object.__setattr__(self, "sentinels", dict(self.sentinels))
        object.__setattr__(self, "compiled_detect_patterns", compiled)

    def matches(self, full_text: str) -> Optional[str]:
        """Return the first detect pattern found in ``full_text``, if any."""
        for pattern in self.compiled_detect_patterns:
            if pattern.search(full_text):
                return pattern.pattern
        return None

    def extract(
        self,
        full_text: str,
        page_texts: Sequence[str],
        log_sink: Optional[LogSink] = None,
        address_normalizer: AddressNormalizer = normalize_address,
    ) -> ExtractionResult:
        from .engine import run_cascades

        return run_cascades(self, full_text, page_texts, log_sink, address_normalizer)

    def to_summary(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}
