"""Engine error taxonomy."""

from dataclasses import dataclass
from uuid import UUID


class NutritionEngineError(Exception):
    """Base class for engine errors."""


class InvalidScaleFactor(NutritionEngineError, ValueError):
    """Raised when a macro vector is scaled by a negative or non-finite factor."""


class InvalidServings(NutritionEngineError, ValueError):
    """Raised when a recipe or plan entry has unusable servings."""


class InvalidAmount(NutritionEngineError, ValueError):
    """Raised when an ingredient line amount is not positive."""


class InvalidMacroValue(NutritionEngineError, ValueError):
    """Raised when a macro field is negative or not finite."""


class InvalidDateRange(NutritionEngineError, ValueError):
    """Raised when a date range ends before it starts."""


class NoActiveGoal(NutritionEngineError):
    """The owner has no active goal, so no remaining budget exists."""

    def __init__(self, owner_id: UUID) -> None:
        super().__init__(f"No active goal for owner {owner_id}")
        self.owner_id = owner_id


class RegenerationNotAllowed(NutritionEngineError):
    """Raised when a non-admin actor asks to regenerate suggestions."""


class SynthesisUnavailable(NutritionEngineError):
    """The recipe synthesis collaborator returned nothing usable."""


@dataclass(frozen=True)
class Diagnostic:
    """A tolerated condition reported alongside a result."""

    code: str
    message: str
    ref: str | None = None
