"""Calculator definitions, the computation contract and the registry.

Each category module exposes a ``DEFINITIONS`` tuple; :mod:`.catalog` stitches
them into the default :class:`CalculatorRegistry`.
"""

from .base import (
    CalculationResult,
    CalculationValidationError,
    CalculatorDefinition,
    CalculatorInputs,
    Category,
    OutputSpec,
    Refinement,
    format_value,
    input_field,
)
from .catalog import build_default_registry, get_registry
from .registry import CalculatorNotFoundError, CalculatorRegistry, DuplicateDefinitionError

__all__ = [
    "CalculationResult",
    "CalculationValidationError",
    "CalculatorDefinition",
    "CalculatorInputs",
    "CalculatorNotFoundError",
    "CalculatorRegistry",
    "Category",
    "DuplicateDefinitionError",
    "OutputSpec",
    "Refinement",
    "build_default_registry",
    "format_value",
    "get_registry",
    "input_field",
]
