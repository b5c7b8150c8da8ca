"""Row conversion helpers shared by the Supabase repositories."""

from datetime import date

from nutrition_engine.domain.macros import MACRO_FIELDS, MacroVector


def macros_from_row(row: dict[str, object], prefix: str = "") -> MacroVector:
    """Read macro columns, optionally prefixed (e.g. ``total_calories``)."""
    return MacroVector(
        **{name: float(row.get(f"{prefix}{name}") or 0.0) for name in MACRO_FIELDS}
    )


def macros_to_row(macros: MacroVector, prefix: str = "") -> dict[str, float]:
    """Write macro columns with an optional prefix."""
    return {f"{prefix}{name}": value for name, value in macros.as_dict().items()}


def parse_day(value: object) -> date:
    """Parse a ``date`` column, accepting full timestamps as well."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])
