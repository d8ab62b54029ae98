"""
Address normalization.

Text pulled out of bill PDFs arrives with split state codes ("N J"), broken
ZIP+4 codes ("07302- 6475"), run-together tokens ("123Main") and arbitrary
casing. ``normalize_address`` repairs those in a fixed order.
"""

from __future__ import annotations

import re
from typing import Optional

STATE_ABBREVIATIONS = ("NJ", "NY", "PA", "CT", "MA")
DIRECTION_ABBREVIATIONS = ("N", "S", "E", "W", "NE", "NW", "SE", "SW")

_SPLIT_STATE_RE = re.compile(r"\b([A-Z])\s+([A-Z])\b")
_ZIP_PLUS_FOUR_RE = re.compile(r"(\d{5})\s*-\s*(\d{4})")
_DIGIT_LETTER_RE = re.compile(r"(\d)([A-Za-z])")
_LETTER_DIGIT_RE = re.compile(r"([A-Za-z])(\d)")
_WHITESPACE_RE = re.compile(r"\s+")
_WORD_START_RE = re.compile(r"\b\w")
_UPPERCASE_TOKEN_RE = re.compile(
    r"\b(" + "|".join(STATE_ABBREVIATIONS + DIRECTION_ABBREVIATIONS) + r")\b",
    re.IGNORECASE,
)


def _title_case(text: str) -> str:
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), text.lower())


def normalize_address(address: Optional[str]) -> Optional[str]:
    """
    Normalize a raw service address.

    Steps, in order:
    1. "N J" -> "NJ" (two single uppercase letters)
    2. "07302- 6475" -> "07302-6475"
    3. space at every digit/letter boundary
    4. collapse whitespace, trim
    5. title case
    6. re-uppercase state and street-direction abbreviations

    Returns None for None or empty input.
    """
    if not address:
        return None

    address = _SPLIT_STATE_RE.sub(r"\1\2", address)
    address = _ZIP_PLUS_FOUR_RE.sub(r"\1-\2", address)

    address = _DIGIT_LETTER_RE.sub(r"\1 \2", address)
    address = _LETTER_DIGIT_RE.sub(r"\1 \2", address)

    address = _WHITESPACE_RE.sub(" ", address).strip()
    if not address:
        return None

    address = _title_case(address)

    # Title casing turns "NJ" into "Nj" and "SE" into "Se"
    address = _UPPERCASE_TOKEN_RE.sub(lambda m: m.group(0).upper(), address)

    return address
