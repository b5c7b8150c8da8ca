"""Domain models for goals, meal logs and meal plans."""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum
from uuid import UUID

from nutrition_engine.domain.errors import InvalidDateRange
from nutrition_engine.domain.macros import MacroVector

DAYS_IN_WEEK = 7


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidDateRange(f"Range ends ({self.end}) before it starts")

    @classmethod
    def single(cls, day: date) -> "DateRange":
        """Return a range covering one day."""
        return cls(start=day, end=day)

    @classmethod
    def week_of(cls, day: date) -> "DateRange":
        """Return the Monday-to-Sunday week containing ``day``."""
        start = day - timedelta(days=day.weekday())
        return cls(start=start, end=start + timedelta(days=DAYS_IN_WEEK - 1))

    def contains(self, day: date) -> bool:
        """Return True when ``day`` falls inside the range."""
        return self.start <= day <= self.end

    def days(self) -> list[date]:
        """Return every day in the range, in order."""
        count = (self.end - self.start).days + 1
        return [self.start + timedelta(days=offset) for offset in range(count)]


class MealTime(StrEnum):
    """Slot a planned recipe is scheduled for."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class Goal:
    """Daily macro target."""

    id: UUID
    owner_id: UUID
    target: MacroVector
    is_active: bool = True


@dataclass(frozen=True)
class MealLogEntry:
    """A logged meal with its totals."""

    id: UUID
    owner_id: UUID
    day: date
    total_macros: MacroVector


@dataclass(frozen=True)
class MealPlanEntry:
    """A recipe scheduled for a day."""

    id: UUID
    owner_id: UUID
    day: date
    recipe_id: UUID
    servings: float
    meal_time: MealTime = MealTime.DINNER


@dataclass(frozen=True)
class DailyTotals:
    """Macro totals for one day."""

    day: date
    macros: MacroVector
