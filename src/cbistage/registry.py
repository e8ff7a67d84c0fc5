"""
CBI Stage Registries

This module contains the registry mapping context kinds to staging strategies.

The set of context kinds is closed (it is fixed by the BuildJob schema), so the
registry is a static table filled once at import time rather than discovered.

Dependencies:
- protocols: For Protocol type hints
- bases: The concrete strategies
"""

from typing import Dict, Generic, Iterable, Optional, Set, Tuple, Type, TypeVar
import logging

from . import constants
from .constants import ContextKind
from .protocols import StagingStrategyProtocol
from .bases import GitStrategy, ConfigMapStrategy, HTTPStrategy, RcloneStrategy

logger = logging.getLogger(__name__)

K = TypeVar('K')
V = TypeVar('V')


class Registry(Generic[K, V]):
    """
    A generic read-mostly lookup table.
    """

    def __init__(self, items: Iterable[Tuple[K, V]] = ()):
        self._registry: Dict[K, V] = {}
        for key, value in items:
            self.register(key, value)
        logger.debug(f"Initialized {self.__class__.__name__} with {len(self._registry)} item(s)")

    def register(self, key: K, value: V):
        self._registry[key] = value
        logger.debug(f"Registered in {self.__class__.__name__}: {key} -> {getattr(value, '__name__', str(value))}")

    def get(self, key: K) -> Optional[V]:
        return self._registry.get(key)

    @property
    def registry(self) -> Dict[K, V]:
        return dict(self._registry)


class StrategyRegistry(Registry[ContextKind, Type[StagingStrategyProtocol]]):
    """
    Registry of staging strategy classes keyed by context kind.
    """

    def strategy(self, kind) -> Optional[Type[StagingStrategyProtocol]]:
        try:
            return self.get(ContextKind(kind))
        except ValueError:
            return None

    def get_supports(self) -> Set[str]:
        """Get all supported context kinds."""
        return {kind.value for kind in self._registry}

    def labels(self) -> Dict[str, str]:
        """Plugin selector labels of every supported context kind"""
        return {constants.CONTEXT_LABELS[kind]: "" for kind in self._registry}


# Global registry
strategy_registry = StrategyRegistry(
    (strategy.kind, strategy)
    for strategy in (GitStrategy, ConfigMapStrategy, HTTPStrategy, RcloneStrategy)
)
