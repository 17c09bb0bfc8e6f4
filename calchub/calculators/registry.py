"""Ordered, read-only collection of calculator definitions."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from calchub.calculators.base import CalculatorDefinition, Category


class DuplicateDefinitionError(ValueError):
    """Raised when two definitions share an id while assembling a registry."""


class CalculatorNotFoundError(LookupError):
    """Raised by :meth:`CalculatorRegistry.require` for an unknown id."""

    def __init__(self, calculator_id: str) -> None:
        self.calculator_id = calculator_id
        super().__init__(f"No calculator is registered under {calculator_id!r}")


class CalculatorRegistry:
    """Registration-ordered lookup of calculators by id, name and category.

    The registry is assembled once at start-up. After :meth:`seal` it refuses
    further registrations.
    """

    def __init__(self, definitions: Iterable[CalculatorDefinition] = ()) -> None:
        self._definitions: dict[str, CalculatorDefinition] = {}
        self._sealed = False
        for definition in definitions:
            self.register(definition)

    def register(self, definition: CalculatorDefinition) -> CalculatorDefinition:
        if self._sealed:
            raise RuntimeError("Calculator registry is sealed; register before start-up completes")
        if definition.id in self._definitions:
            raise DuplicateDefinitionError(
                f"A calculator with id {definition.id!r} is already registered"
            )
        self._definitions[definition.id] = definition
        return definition

    def seal(self) -> "CalculatorRegistry":
        self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    def get(self, calculator_id: str) -> CalculatorDefinition | None:
        return self._definitions.get(calculator_id)

    def require(self, calculator_id: str) -> CalculatorDefinition:
        definition = self._definitions.get(calculator_id)
        if definition is None:
            raise CalculatorNotFoundError(calculator_id)
        return definition

    def all(self) -> list[CalculatorDefinition]:
        return list(self._definitions.values())

    def list_by_category(self, category: Category | str) -> list[CalculatorDefinition]:
        wanted = Category(category)
        return [
            definition
            for definition in self._definitions.values()
            if definition.category is wanted
        ]

    def categories(self) -> list[Category]:
        """Categories that have at least one calculator, sorted by label."""

        present = {definition.category for definition in self._definitions.values()}
        return sorted(present, key=lambda category: category.value)

    def names(self) -> list[str]:
        return [definition.name for definition in self._definitions.values()]

    def find_by_name(self, name: str) -> CalculatorDefinition | None:
        cleaned = name.strip().casefold()
        if not cleaned:
            return None
        return next(
            (
                definition
                for definition in self._definitions.values()
                if definition.name.casefold() == cleaned
            ),
            None,
        )

    def search(self, term: str) -> list[CalculatorDefinition]:
        """Case-insensitive substring match on name, description and category."""

        needle = term.strip().casefold()
        if not needle:
            return self.all()
        return [
            definition
            for definition in self._definitions.values()
            if needle in definition.name.casefold()
            or needle in definition.description.casefold()
            or needle in definition.category.value.casefold()
        ]

    def __contains__(self, calculator_id: object) -> bool:
        return calculator_id in self._definitions

    def __iter__(self) -> Iterator[CalculatorDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)


__all__ = ["CalculatorNotFoundError", "CalculatorRegistry", "DuplicateDefinitionError"]
