"""Assembly of the default calculator catalog."""

from __future__ import annotations

import logging
from functools import lru_cache

from calchub.calculators import arithmetic, conversions, dates, everyday, finance, health
from calchub.calculators.base import CalculatorDefinition
from calchub.calculators.registry import CalculatorRegistry

logger = logging.getLogger(__name__)

DEFAULT_DEFINITIONS: tuple[CalculatorDefinition, ...] = (
    *finance.DEFINITIONS,
    *health.DEFINITIONS,
    *arithmetic.DEFINITIONS,
    *conversions.DEFINITIONS,
    *dates.DEFINITIONS,
    *everyday.DEFINITIONS,
)


def build_default_registry() -> CalculatorRegistry:
    """Register every bundled calculator and seal the registry.

    A duplicated id raises :class:`DuplicateDefinitionError` here, at start-up.
    """

    registry = CalculatorRegistry(DEFAULT_DEFINITIONS).seal()
    logger.debug("Calculator registry assembled with %d definitions", len(registry))
    return registry


@lru_cache(maxsize=1)
def get_registry() -> CalculatorRegistry:
    """Return the process-wide default registry."""

    return build_default_registry()


__all__ = ["DEFAULT_DEFINITIONS", "build_default_registry", "get_registry"]
