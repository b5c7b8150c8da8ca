"""Macro vector value type."""

import math
from collections.abc import Iterable
from dataclasses import dataclass, fields

from nutrition_engine.domain.errors import InvalidMacroValue, InvalidScaleFactor

MACRO_FIELDS = ("calories", "protein", "carbs", "fat", "fiber")


@dataclass(frozen=True)
class MacroVector:
    """Calories plus protein, carbs, fat and fiber in grams.

    Every field is non-negative. Calories are stored as given and are never
    re-derived from the other fields.
    """

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if not math.isfinite(value) or value < 0:
                raise InvalidMacroValue(
                    f"Macro field {item.name} must be >= 0, got {value}"
                )

    @classmethod
    def zero(cls) -> "MacroVector":
        """Return the zero vector."""
        return cls()

    @classmethod
    def clamped(  # noqa: PLR0913
        cls,
        calories: float,
        protein: float,
        carbs: float,
        fat: float,
        fiber: float,
    ) -> "MacroVector":
        """Build a vector, flooring every field at zero."""
        return cls(
            calories=max(0.0, calories),
            protein=max(0.0, protein),
            carbs=max(0.0, carbs),
            fat=max(0.0, fat),
            fiber=max(0.0, fiber),
        )

    @classmethod
    def from_mapping(cls, values: dict[str, object]) -> "MacroVector":
        """Build a vector from a mapping, treating missing fields as zero."""
        return cls(**{name: float(values.get(name) or 0.0) for name in MACRO_FIELDS})

    def add(self, other: "MacroVector") -> "MacroVector":
        """Return the field-wise sum."""
        return MacroVector(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
            fiber=self.fiber + other.fiber,
        )

    def scale(self, factor: float) -> "MacroVector":
        """Return the vector multiplied by a non-negative, finite factor."""
        if isinstance(factor, bool) or not math.isfinite(factor) or factor < 0:
            raise InvalidScaleFactor(f"Cannot scale macros by {factor!r}")
        return MacroVector(
            calories=self.calories * factor,
            protein=self.protein * factor,
            carbs=self.carbs * factor,
            fat=self.fat * factor,
            fiber=self.fiber * factor,
        )

    def subtract_floored(self, other: "MacroVector") -> "MacroVector":
        """Return max(0, self - other) per field."""
        return MacroVector.clamped(
            calories=self.calories - other.calories,
            protein=self.protein - other.protein,
            carbs=self.carbs - other.carbs,
            fat=self.fat - other.fat,
            fiber=self.fiber - other.fiber,
        )

    def as_dict(self) -> dict[str, float]:
        """Return the vector as a plain mapping."""
        return {name: getattr(self, name) for name in MACRO_FIELDS}

    def __add__(self, other: "MacroVector") -> "MacroVector":
        return self.add(other)


def sum_macros(vectors: Iterable[MacroVector]) -> MacroVector:
    """Sum vectors field by field.

    Uses exactly rounded summation, so the result does not depend on the
    order of ``vectors``.
    """
    items = list(vectors)
    return MacroVector(
        **{
            name: math.fsum(getattr(item, name) for item in items)
            for name in MACRO_FIELDS
        }
    )
