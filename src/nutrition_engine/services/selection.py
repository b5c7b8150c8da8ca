"""Selection of catalog recipe combinations for a remaining budget."""

import itertools
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nutrition_engine.domain.catalog import Recipe
from nutrition_engine.domain.macros import MACRO_FIELDS, MacroVector, sum_macros

if TYPE_CHECKING:
    from nutrition_engine.config import Settings

PRIMARY_FIELDS = ("calories", "protein")

# Calories and protein drive the match; carbs and fat only break ties.
_DEVIATION_WEIGHTS = {
    "calories": 1.0,
    "protein": 1.0,
    "carbs": 0.25,
    "fat": 0.25,
    "fiber": 0.0,
}


@dataclass(frozen=True)
class SelectionPolicy:
    """Numeric rules for choosing suggestions."""

    negligible: MacroVector = MacroVector(
        calories=100, protein=10, carbs=10, fat=5, fiber=5
    )
    tolerance_over: float = 0.10
    tolerance_under: float = 0.05
    max_recipes: int = 3
    max_candidates: int = 40

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SelectionPolicy":
        """Build the policy from application settings."""
        return cls(
            negligible=MacroVector(
                calories=settings.negligible_calories,
                protein=settings.negligible_protein,
                carbs=settings.negligible_carbs,
                fat=settings.negligible_fat,
                fiber=settings.negligible_fiber,
            ),
            tolerance_over=settings.tolerance_over,
            tolerance_under=settings.tolerance_under,
            max_recipes=settings.max_suggested_recipes,
            max_candidates=settings.max_candidate_recipes,
        )

    def is_negligible(self, remaining: MacroVector) -> bool:
        """Return True when every field is below its negligible threshold."""
        return all(
            getattr(remaining, name) < getattr(self.negligible, name)
            for name in MACRO_FIELDS
        )

    def fits_ceiling(self, combined: MacroVector, remaining: MacroVector) -> bool:
        """Return True when no field exceeds the budget by more than allowed."""
        return all(
            getattr(combined, name)
            <= getattr(remaining, name) * (1 + self.tolerance_over)
            for name in MACRO_FIELDS
        )

    def meets_floor(self, combined: MacroVector, remaining: MacroVector) -> bool:
        """Return True when calories and protein are not far below the budget."""
        return all(
            getattr(combined, name)
            >= getattr(remaining, name) * (1 - self.tolerance_under)
            for name in PRIMARY_FIELDS
        )


@dataclass(frozen=True)
class Candidate:
    """A catalog recipe with the macros of one suggested serving."""

    recipe: Recipe
    macros: MacroVector


@dataclass(frozen=True)
class Combination:
    """A set of candidates and their combined macros."""

    candidates: tuple[Candidate, ...]
    macros: MacroVector
    deviation: float

    @property
    def recipes(self) -> list[Recipe]:
        return [candidate.recipe for candidate in self.candidates]

    def sort_key(self) -> tuple[int, float, tuple[str, ...]]:
        return (
            len(self.candidates),
            self.deviation,
            tuple(str(candidate.recipe.id) for candidate in self.candidates),
        )


@dataclass(frozen=True)
class SelectionOutcome:
    """Best in-band combination and the closest one under the ceiling."""

    match: Combination | None
    fallback: Combination | None


def deviation(combined: MacroVector, remaining: MacroVector) -> float:
    """Weighted relative distance between combined macros and the budget."""
    total = 0.0
    for name, weight in _DEVIATION_WEIGHTS.items():
        if not weight:
            continue
        target = getattr(remaining, name)
        scale = target if target > 0 else 1.0
        total += weight * ((getattr(combined, name) - target) / scale) ** 2
    return math.sqrt(total)


def select_combination(
    remaining: MacroVector, candidates: list[Candidate], policy: SelectionPolicy
) -> SelectionOutcome:
    """Find the smallest, closest combination inside the tolerance band.

    Combinations are searched by size, so any in-band pair loses to an in-band
    single recipe. When nothing is in band the closest combination that still
    respects the ceiling is returned as the fallback.
    """
    eligible = [
        candidate
        for candidate in candidates
        if policy.fits_ceiling(candidate.macros, remaining)
    ]
    eligible.sort(
        key=lambda candidate: (
            deviation(candidate.macros, remaining),
            str(candidate.recipe.id),
        )
    )
    eligible = eligible[: policy.max_candidates]

    match: Combination | None = None
    fallback: Combination | None = None
    for size in range(1, policy.max_recipes + 1):
        for group in itertools.combinations(eligible, size):
            combined = sum_macros(candidate.macros for candidate in group)
            if not policy.fits_ceiling(combined, remaining):
                continue
            combination = Combination(
                candidates=group,
                macros=combined,
                deviation=deviation(combined, remaining),
            )
            if policy.meets_floor(combined, remaining):
                if match is None or combination.sort_key() < match.sort_key():
                    match = combination
            elif fallback is None or (
                combination.deviation,
                combination.sort_key(),
            ) < (fallback.deviation, fallback.sort_key()):
                fallback = combination
        if match is not None:
            break
    return SelectionOutcome(match=match, fallback=fallback)
