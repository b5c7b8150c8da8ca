"""Daily consumption aggregation over meal logs."""

from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from nutrition_engine.domain.macros import MacroVector, sum_macros
from nutrition_engine.domain.plans import DailyTotals, DateRange, MealLogEntry


class MealLogRepository(Protocol):
    """Read interface for logged meals."""

    def list_meal_logs(
        self, owner_id: UUID, date_range: DateRange
    ) -> list[MealLogEntry]:
        """Return an owner's meal logs within the range."""


@dataclass
class PeriodSummary:
    """Per-day totals and daily averages for a range."""

    daily: list[DailyTotals]
    total: MacroVector
    average: MacroVector


@dataclass
class ConsumptionService:
    """Service that folds meal logs into consumed macros."""

    repository: MealLogRepository

    def consumed(self, owner_id: UUID, date_range: DateRange) -> MacroVector:
        """Return the sum of every meal logged by the owner in the range."""
        logs = self.repository.list_meal_logs(owner_id, date_range)
        return aggregate_consumption(logs, owner_id, date_range)

    def consumed_on(self, owner_id: UUID, day: date) -> MacroVector:
        """Return the macros consumed on a single day."""
        return self.consumed(owner_id, DateRange.single(day))

    def summarize_period(self, owner_id: UUID, date_range: DateRange) -> PeriodSummary:
        """Return per-day totals and averages for the range."""
        logs = self.repository.list_meal_logs(owner_id, date_range)
        daily = [
            DailyTotals(
                day=day,
                macros=aggregate_consumption(logs, owner_id, DateRange.single(day)),
            )
            for day in date_range.days()
        ]
        total = sum_macros(entry.macros for entry in daily)
        return PeriodSummary(
            daily=daily,
            total=total,
            average=total.scale(1 / len(daily)),
        )


def aggregate_consumption(
    logs: list[MealLogEntry], owner_id: UUID, date_range: DateRange
) -> MacroVector:
    """Sum the totals of the owner's logs that fall inside the range."""
    return sum_macros(
        log.total_macros
        for log in logs
        if log.owner_id == owner_id and date_range.contains(log.day)
    )
