"""
Post-processing transforms for captured field values.

Every transform is a pure ``str -> str`` function looked up by name, so rule
tables stay plain data. ``normalize_address`` is resolved at run time to the
address normalizer handed to the engine.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, Optional

AddressNormalizer = Callable[[Optional[str]], Optional[str]]

NORMALIZE_ADDRESS = "normalize_address"


def strip_currency(value: str) -> str:
    """Remove currency symbols ($, and the rare unicode ones OCR produces)."""
    return re.sub(r"[$¢£€]", "", value)


def strip_thousands(value: str) -> str:
    return value.replace(",", "")


def collapse_whitespace(value: str) -> str:
    return re.sub(r"\s+", " ", value)


def remove_whitespace(value: str) -> str:
    return re.sub(r"\s+", "", value)


def trim(value: str) -> str:
    return value.strip()


TRANSFORMS: Dict[str, Callable[[str], str]] = {
    "strip_currency": strip_currency,
    "strip_thousands": strip_thousands,
    "collapse_whitespace": collapse_whitespace,
    "remove_whitespace": remove_whitespace,
    "trim": trim,
}

# Shorthands used by the provider tables
MONEY = ("strip_currency", "strip_thousands", "trim")
NUMBER = ("strip_thousands", "trim")
ADDRESS = ("collapse_whitespace", "trim", NORMALIZE_ADDRESS)


def is_known_transform(name: str) -> bool:
    return name in TRANSFORMS or name == NORMALIZE_ADDRESS


def apply_transforms(
    value: Optional[str],
    names: Iterable[str],
    address_normalizer: Optional[AddressNormalizer] = None,
) -> Optional[str]:
    """
    Run ``names`` over ``value`` in order.

    A None from the address normalizer short-circuits the rest of the chain.
    Without an injected normalizer the ``normalize_address`` step is skipped.
    """
    for name in names:
        if value is None:
            return None
        if name == NORMALIZE_ADDRESS:
            if address_normalizer is not None:
                value = address_normalizer(value)
            continue
        value = TRANSFORMS[name](value)
    return value
