"""
Bill Parser
===========
Provider-based field extraction from utility bill text. Each issuer
declares detect patterns and ordered rule cascades per field; documents are
detected, extracted, and retried against other issuers when the first guess
finds neither an account number nor a service address.
"""

from .address import normalize_address
from .detector import detect
from .engine import extract
from .models import (
    BillParserError,
    DuplicateProviderId,
    ExtractionResult,
    ExtractionRule,
    ProviderDefinition,
    RegistryFrozenError,
    RuleDefinitionError,
    Scope,
    UnknownProviderError,
)
from .orchestrator import Resolution, resolve
from .registry import ProviderRegistry, build_default_registry, get_default_registry

__all__ = [
    'normalize_address', 'detect', 'extract', 'resolve', 'Resolution',
    'ProviderRegistry', 'build_default_registry', 'get_default_registry',
    'ProviderDefinition', 'ExtractionRule', 'ExtractionResult', 'Scope',
    'BillParserError', 'DuplicateProviderId', 'RegistryFrozenError',
    'RuleDefinitionError', 'UnknownProviderError',
]
