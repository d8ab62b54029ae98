"""
Built-in bill providers.

Order matters: detection and fallback try providers in this order.
"""

from .ace import ACE_PROVIDER, NO_GAS_SENTINEL
from .pseg import PSEG_PROVIDER

BUILTIN_PROVIDERS = (ACE_PROVIDER, PSEG_PROVIDER)

__all__ = ["ACE_PROVIDER", "PSEG_PROVIDER", "NO_GAS_SENTINEL", "BUILTIN_PROVIDERS"]
