"""
Typed extraction results

The header-block parser produces a ``FieldSet`` (scalar fields) and a
``ListSections`` (bulleted sections); the JSON-array parser produces a
``ValidatedArray`` of ``CaseStageCost`` records. All of them are immutable and
never contain missing entries: unresolved values hold a sentinel instead.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from case_companion.constants import NOT_SPECIFIED

FieldValue = str | float


def _frozen(values: Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(values, MappingProxyType):
        return values
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class FieldSet:
    """Named scalar fields: trimmed strings or non-negative percentages"""

    values: Mapping[str, FieldValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _frozen(self.values))

    def __getitem__(self, key: str) -> FieldValue:
        return self.values[key]

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def text(self, key: str) -> str:
        """Return a text field, or the sentinel if the value is numeric or absent."""
        value = self.values.get(key, NOT_SPECIFIED)
        return value if isinstance(value, str) else NOT_SPECIFIED

    def number(self, key: str) -> float:
        """Return a numeric field, or ``0.0`` if the value is text or absent."""
        value = self.values.get(key, 0.0)
        return float(value) if isinstance(value, int | float) else 0.0


@dataclass(frozen=True)
class ListSections:
    """Named bulleted sections with their list markers retained"""

    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _frozen(self.values))

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def get(self, key: str) -> str:
        """Return a section body or the sentinel."""
        return self.values.get(key, NOT_SPECIFIED)


@dataclass(frozen=True)
class HeaderBlock:
    """Everything recovered from one header-template reply."""

    fields: FieldSet
    sections: ListSections
    unresolved: tuple[str, ...] = ()

    @property
    def is_fully_unresolved(self) -> bool:
        """True when no expected header was found at all."""
        total = len(self.fields.values) + len(self.sections.values)
        return total > 0 and len(self.unresolved) == total


@dataclass(frozen=True, slots=True)
class CaseStageCost:
    """One stage of a cost roadmap."""

    id: str
    stage_name: str
    description: str
    estimated_cost_inr: str

    def to_dict(self) -> dict[str, str]:
        """Wire-format mapping, using the field names the UI expects."""
        return {
            "id": self.id,
            "stageName": self.stage_name,
            "description": self.description,
            "estimatedCostINR": self.estimated_cost_inr,
        }


@dataclass(frozen=True)
class ValidatedArray:
    """Ordered, fully validated stage records with per-call unique ids."""

    stages: tuple[CaseStageCost, ...] = ()

    def __len__(self) -> int:
        return len(self.stages)

    def __iter__(self) -> Iterator[CaseStageCost]:
        return iter(self.stages)

    def __getitem__(self, index: int) -> CaseStageCost:
        return self.stages[index]
