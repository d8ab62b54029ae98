"""
Provider Registry
=================
Ordered, id-unique collection of ProviderDefinitions.

Registration order is significant: detection and fallback both walk providers
in the order they were registered. The process-wide registry is built once by
``build_default_registry`` and frozen.

To add a utility provider:
1. Create a module in ``bill_parser/providers/`` exporting a ProviderDefinition
2. Add it to ``BUILTIN_PROVIDERS`` in ``bill_parser/providers/__init__.py``
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, Iterator, List, Optional

from .models import DuplicateProviderId, ProviderDefinition, RegistryFrozenError, UnknownProviderError

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry of bill providers keyed by id, preserving registration order."""

    def __init__(self, definitions: Iterable[ProviderDefinition] = ()):
        self._providers: Dict[str, ProviderDefinition] = {}
        self._frozen = False
        for definition in definitions:
            self.register(definition)

    def register(self, definition: ProviderDefinition) -> ProviderDefinition:
        """
        Add a provider.

        Raises:
            DuplicateProviderId: the id is already registered
            RegistryFrozenError: the registry has been frozen
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register {definition.id!r}: registry is frozen"
            )
        if definition.id in self._providers:
            raise DuplicateProviderId(definition.id)
        self._providers[definition.id] = definition
        logger.debug(f"Registered provider {definition.id} ({definition.name})")
        return definition

    def freeze(self) -> "ProviderRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, provider_id: Optional[str]) -> Optional[ProviderDefinition]:
        if provider_id is None:
            return None
        return self._providers.get(provider_id)

    def require(self, provider_id: str) -> ProviderDefinition:
        definition = self.get(provider_id)
        if definition is None:
            raise UnknownProviderError(provider_id)
        return definition

    def all(self) -> List[ProviderDefinition]:
        """Providers in registration order."""
        return list(self._providers.values())

    def ids(self) -> List[str]:
        return list(self._providers)

    def __iter__(self) -> Iterator[ProviderDefinition]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def __repr__(self) -> str:
        return f"ProviderRegistry({self.ids()!r}, frozen={self._frozen})"


def build_default_registry() -> ProviderRegistry:
    """Build and freeze a registry holding the built-in providers."""
    from .providers import BUILTIN_PROVIDERS

    return ProviderRegistry(BUILTIN_PROVIDERS).freeze()


_DEFAULT_REGISTRY: Optional[ProviderRegistry] = None
_default_registry_lock = threading.Lock()


def get_default_registry() -> ProviderRegistry:
    """Process-wide registry, built on first use."""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is not None:
        return _DEFAULT_REGISTRY
    with _default_registry_lock:
        if _DEFAULT_REGISTRY is None:
            _DEFAULT_REGISTRY = build_default_registry()
        return _DEFAULT_REGISTRY
