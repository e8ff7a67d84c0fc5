"""
CBI Stage Factories

This module contains the factory creating staging strategies for context kinds.

Dependencies:
- registry: For the kind -> strategy table
"""

from typing import Optional
import logging

from .datacls import Helper
from .exceptions import UnsupportedContextKind
from .protocols import StagingStrategyProtocol
from .registry import StrategyRegistry, strategy_registry

logger = logging.getLogger(__name__)


class StrategyFactory:
    """
    Factory Creates the staging strategy matching a context kind.
    Every strategy it creates shares the same helper settings.
    """

    def __init__(self, helper: Optional[Helper] = None, registry: Optional[StrategyRegistry] = None):
        self.helper = helper or Helper()
        self.registry = registry or strategy_registry
        logger.debug(f"StrategyFactory initialized with helper image '{self.helper.image}'.")

    def create(self, kind) -> StagingStrategyProtocol:
        """
        Args:
            kind: Context kind, either a ContextKind or its wire tag

        Returns:
            StagingStrategyProtocol: A strategy instance for `kind`

        Raises:
            UnsupportedContextKind: If no strategy is registered for `kind`
        """
        strategy_class = self.registry.strategy(kind)
        if not strategy_class:
            raise UnsupportedContextKind(getattr(kind, "value", kind), supported=self.registry.get_supports())

        logger.debug(f"Creating {strategy_class.__name__} for '{getattr(kind, 'value', kind)}' context.")
        return strategy_class(self.helper)
