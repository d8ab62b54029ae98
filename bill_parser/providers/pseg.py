"""
PSE&G (Public Service Electric & Gas)
====================================
PSE&G bills carry no account number on the first page; bills are identified
by two Point of Delivery ids printed on page 3 or 4:

    Your PoD ID is: PE000012054105751628   (electric)
    Your PoD ID is: PG000012054105751628   (gas)

Only the 18 digits are kept.
"""

import re

from ..models import ExtractionRule, ProviderDefinition, Scope
from ..transforms import ADDRESS, MONEY, NUMBER

PSEG_PROVIDER = ProviderDefinition(
    id="pseg",
    name="PSE&G",
    detect_patterns=(r"\bPSEG\b", r"Public\s*Service\s*Electric"),
    field_rules={
        # Street, city, state, then a ZIP or ZIP+4
        "service_address": (
            ExtractionRule(
                r"Service\s*address[:\s]*(.+?\s*\d{5}(?:\s*-\s*\d{4})?)",
                scope=Scope.FIRST_PAGE_TEXT,
                post_process=ADDRESS,
                flags=re.IGNORECASE | re.DOTALL,
            ),
        ),
        "electric_pod_id": (
            ExtractionRule(r"Your\s+PoD\s+ID\s+is:\s+PE(\d{18})"),
        ),
        "gas_pod_id": (
            ExtractionRule(r"Your\s+PoD\s+ID\s+is:\s+PG(\d{18})"),
        ),
        "gas_supply_charges": (
            ExtractionRule(r"Total\s+gas\s+supply\s+charges\s+\$?([\d,]+\.\d{2})", post_process=MONEY),
        ),
        "electric_supply_charges": (
            ExtractionRule(r"Total\s+electric\s+supply\s+charges\s+\$?([\d,]+\.\d{2})", post_process=MONEY),
            # "Electric supply charges - AEP Energy, Inc. $6,882.85"
            ExtractionRule(r"Electric\s+supply\s+charges\s+-\s+[^$\n]+\$?([\d,]+\.\d{2})", post_process=MONEY),
            # "Total AEP Energy, Inc. Charges $6,882.85"
            ExtractionRule(
                r"Total\s+[A-Z][^\n]+(?:Energy|Power)[^\n]+Charges\s+\$?([\d,]+\.\d{2})",
                post_process=MONEY,
            ),
        ),
        "total_usage_kwh": (
            # "Total electric you used in 29 days 2,972 kWh"
            ExtractionRule(
                r"Total\s+(?:electric\s+)?(?:you\s+)?used\s+(?:in\s+\d+\s+days\s+)?([\d,]+)\s+kWh",
                post_process=NUMBER,
            ),
            ExtractionRule(r"Total\s+kWh\s+([\d,]+)", post_process=NUMBER),
            ExtractionRule(r"Total\s+(?:energy\s+)?used[:\s]+([\d,]+)\s+kWh", post_process=NUMBER),
            ExtractionRule(r"Total\s+kWh[:\s]+([\d,]+)", post_process=NUMBER),
        ),
    },
    id_columns=(("PE", "electric_pod_id"), ("PG", "gas_pod_id")),
)
