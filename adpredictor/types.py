"""Data classes for sparse labeled examples."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator


@dataclass(frozen=True)
class FeatureActivation:
    """One entry of a sparse feature vector."""
    id: int
    value: float = 1.0


@dataclass
class Example:
    """A labeled sparse example.

    ``label > 0`` is a positive (click/conversion); anything else negative.
    Prediction ignores the label.
    """
    features: list[FeatureActivation] = field(default_factory=list)
    label: float = 0.0

    @property
    def is_positive(self) -> bool:
        return self.label > 0.0

    def active_features(self) -> list[FeatureActivation]:
        """Features with a non-zero value, in their original order."""
        return [f for f in self.features if f.value != 0.0]

    @classmethod
    def from_pairs(cls, pairs, label: float = 0.0) -> Example:
        """Build from ``(id, value)`` pairs."""
        return cls(
            features=[FeatureActivation(int(fid), float(value)) for fid, value in pairs],
            label=float(label),
        )


@dataclass
class DataSet:
    """Ordered collection of examples."""
    examples: list[Example] = field(default_factory=list)

    def add(self, example: Example) -> None:
        self.examples.append(example)

    def __len__(self) -> int:
        return len(self.examples)

    def __iter__(self) -> Iterator[Example]:
        return iter(self.examples)

    @property
    def positive_rate(self) -> float:
        if not self.examples:
            return 0.0
        return sum(1 for e in self.examples if e.is_positive) / len(self.examples)
