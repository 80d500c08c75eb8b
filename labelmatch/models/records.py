"""Plain records exchanged with the matching engine."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MasterRecord:
    """Canonical catalog entry that free-text labels resolve to."""

    id: Any
    name: str
    unit_price: float | None = None
    raw_materials_text: str | None = None
    allergen_text: str | None = None
    series: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "unit_price": self.unit_price,
            "raw_materials_text": self.raw_materials_text,
            "allergen_text": self.allergen_text,
            "series": self.series,
        }


@dataclass(frozen=True)
class SourceItem:
    """One line from an external document (CSV row, marketplace export, quote)."""

    raw_label: str
    quantity: float = 0.0
    source_tag: str = ""


@dataclass(frozen=True)
class LearnedMapping:
    """Human-confirmed association from an exact raw label to a master id."""

    raw_label: str
    master_id: Any


@dataclass
class DuplicateGroup:
    """Several distinct raw labels that resolved to the same master record."""

    master: MasterRecord
    raw_labels: list[str] = field(default_factory=list)
    quantities: list[float] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.raw_labels)

    @property
    def total_quantity(self) -> float:
        return sum(self.quantities)
