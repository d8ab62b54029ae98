"""
Unit tests for provider detection.
"""

import pytest

from bill_parser.debug_log import DebugLog
from bill_parser.detector import detect


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Your ACE bill for October", "ace"),
        ("ATLANTIC CITY ELECTRIC\nP.O. Box 13610", "ace"),
        ("atlantic cityelectric", "ace"),
        ("Thank you for choosing PSEG", "pseg"),
        ("Public Service Electric and Gas Company", "pseg"),
        ("publicservice electric", "pseg"),
    ],
)
def test_detects_issuer_by_name_or_long_form(text, expected):
    assert detect(text) == expected


def test_no_marker_returns_none():
    assert detect("Jersey Central Power & Light\nAccount 1234") is None
    assert detect("") is None
    assert detect(None) is None


def test_short_name_needs_word_boundary():
    # "place" and "PSEGas" are not issuer names
    assert detect("Meter place near the PSEGas line") is None


def test_first_registered_provider_wins(two_provider_registry):
    """Both markers present: registration order decides."""
    text = "BETA Gas Company, billing agent for ALPHA"
    assert detect(text, two_provider_registry) == "alpha"


def test_detection_writes_to_log_sink(two_provider_registry):
    log = DebugLog()
    detect("Beta Gas Company", two_provider_registry, log_sink=log)
    detect("unrelated", two_provider_registry, log_sink=log)

    assert log.lines[0].endswith("Detected: Beta Gas")
    assert log.lines[1].endswith("Could not detect utility type, trying all providers...")
