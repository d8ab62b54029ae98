"""
ACE (Atlantic City Electric)
============================
Electric-only utility; gas is always reported with a sentinel.

ACE bills show the meter table as:
    Use (kWh) <date> <current reading> <date> <previous reading> <difference> <multiplier> <total use>
so the usage value is always the last number of the matched row.
"""

import re

from ..models import LAST_GROUP, ExtractionRule, ProviderDefinition, Scope
from ..transforms import ADDRESS, MONEY, NUMBER

NO_GAS_SENTINEL = "ACE Doesn't Supply Gas"

ACE_PROVIDER = ProviderDefinition(
    id="ace",
    name="ACE",
    detect_patterns=(r"\bACE\b", r"Atlantic\s*City\s*Electric"),
    field_rules={
        # "Accountnumber" and "Account number" both occur
        "account_number": (
            ExtractionRule(
                r"Account\s*number\s*:\s*([\d\s]+)",
                scope=Scope.FIRST_PAGE_TEXT,
                post_process=("remove_whitespace",),
            ),
        ),
        "service_address": (
            ExtractionRule(
                r"Your\s*service\s*address\s*:\s*(.+?)(?=\s*Bill|$)",
                scope=Scope.FIRST_PAGE_TEXT,
                post_process=ADDRESS,
                flags=re.IGNORECASE | re.DOTALL,
            ),
        ),
        "electric_supply_charges": (
            ExtractionRule(r"Total\s+Electric\s+Supply\s+Charges\s+\$?([\d,]+\.\d{2})", post_process=MONEY),
            # Third-party supplier wording
            ExtractionRule(r"New\s+XOOM\s+Energy\s+NJ\s+supply\s+charges\s+\$?([\d,]+\.\d{2})", post_process=MONEY),
            ExtractionRule(r"XOOM\s+Energy\s+NJ\s+electric\s+charges\s+\$?([\d,]+\.\d{2})", post_process=MONEY),
            ExtractionRule(r"(?:New\s+)?electric\s+supply\s+charges\s+\$?([\d,]+\.\d{2})", post_process=MONEY),
            ExtractionRule(r"supply\s+charges\s+\$?([\d,]+\.\d{2})", post_process=MONEY),
        ),
        "total_usage_kwh": (
            # current reading, previous reading, then difference/multiplier/total on one row
            ExtractionRule(
                r"Use\s*\(kWh\)[\s\S]*?(\d{6})[\s\S]*?(\d{6})\s+(\d+)\s+(\d+)\s+(\d+)",
                group=LAST_GROUP,
                post_process=NUMBER,
            ),
            ExtractionRule(
                r"Difference\s+Multiplier\s+Total\s+Use[\s\S]{0,200}?(\d+)\s+(\d+)\s+(\d+)",
                group=LAST_GROUP,
                post_process=NUMBER,
            ),
            # "059363 695 80 55600": previous, difference, multiplier, total
            ExtractionRule(
                r"(\d{6})\s+(\d+)\s+(\d+)\s+(\d+)",
                group=LAST_GROUP,
                post_process=NUMBER,
                flags=0,
            ),
            ExtractionRule(r"Total\s+Use\s+(\d+)", post_process=NUMBER),
        ),
    },
    sentinels={"gas_supply_charges": NO_GAS_SENTINEL},
    id_columns=(("ID Number", "account_number"),),
)
