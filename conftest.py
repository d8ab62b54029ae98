"""
Pytest fixtures shared by the bill parser tests.
Bill texts are trimmed-down renditions of what PDF text extraction produces.
"""

import pytest

from bill_parser.models import ExtractionRule, ProviderDefinition, Scope
from bill_parser.registry import ProviderRegistry
from bill_parser.transforms import ADDRESS

ACE_PAGE_1 = (
    "Atlantic City Electric\n"
    "Account number: 5500 1234 5678\n"
    "Your service address: 123 MAIN ST N J ATLANTIC CITY NJ 08401\n"
    "Bill date: 10/01/2025"
)
ACE_PAGE_2 = (
    "Meter Information\n"
    "Use (kWh) 09/01/2025 123456 08/01/2025 059363 695 80 55600\n"
    "Total Electric Supply Charges $1,234.56\n"
)

PSEG_PAGE_1 = (
    "PSEG\n"
    "Service address: 45 ELM AVE NEWARK N J 07102- 1234\n"
    "Account summary"
)
PSEG_PAGE_3 = (
    "Total electric you used in 29 days 2,972 kWh\n"
    "Electric supply charges - AEP Energy, Inc. $6,882.85\n"
    "Total gas supply charges $512.40\n"
    "Your PoD ID is: PE000012054105751628\n"
    "Your PoD ID is: PG000012054105751699\n"
)


def _join(pages):
    return "".join(f"{p}\n" for p in pages)


@pytest.fixture
def ace_pages():
    return [ACE_PAGE_1, ACE_PAGE_2]


@pytest.fixture
def ace_text(ace_pages):
    return _join(ace_pages)


@pytest.fixture
def pseg_pages():
    return [PSEG_PAGE_1, "Page two", PSEG_PAGE_3]


@pytest.fixture
def pseg_text(pseg_pages):
    return _join(pseg_pages)


@pytest.fixture
def alpha_provider():
    """Detected by "ALPHA", but its account rule needs wording bills rarely use."""
    return ProviderDefinition(
        id="alpha",
        name="Alpha Power",
        detect_patterns=(r"\bALPHA\b",),
        field_rules={
            "account_number": (ExtractionRule(r"Alpha\s+account:\s*(\d+)"),),
            "service_address": (
                ExtractionRule(r"Alpha\s+premises:\s*(.+)", scope=Scope.FIRST_PAGE_TEXT, post_process=ADDRESS),
            ),
        },
        id_columns=(("Account", "account_number"),),
    )


@pytest.fixture
def beta_provider():
    return ProviderDefinition(
        id="beta",
        name="Beta Gas",
        detect_patterns=(r"\bBETA\b", r"Beta\s+Gas\s+Company"),
        field_rules={
            "account_number": (ExtractionRule(r"Account\s+no\.?\s*(\d+)"),),
            "gas_supply_charges": (
                ExtractionRule(r"Gas\s+charges\s+\$?([\d,]+\.\d{2})", post_process=("strip_thousands",)),
            ),
        },
    )


@pytest.fixture
def two_provider_registry(alpha_provider, beta_provider):
    return ProviderRegistry([alpha_provider, beta_provider]).freeze()
