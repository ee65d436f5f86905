"""Per-dialect SQL expressions truncating a timestamp column to a period key.

Each expression renders text identical to
:func:`statkeeper.domain.periods.period_key` for the same instant, so grouped
rows can be matched to client-side buckets by key. SQLite's ``%W`` counts
weeks from the first Monday of the calendar year rather than ISO weeks; the
SQLite week key is therefore derived from the Thursday of the row's ISO week,
which always lies in the ISO year.
"""

from __future__ import annotations

import sqlalchemy as sa

from ..domain.periods import Period
from ..exceptions import CapabilityError

_SQLITE_ISO_THURSDAY = "date({column}, '-3 days', 'weekday 4')"

_TRUNCATIONS: dict[str, dict[Period, str]] = {
    "postgresql": {
        Period.YEAR: "to_char({column}, 'YYYY')",
        Period.MONTH: "to_char({column}, 'YYYY-MM')",
        Period.WEEK: "to_char({column}, 'IYYYIW')",
        Period.DAY: "to_char({column}, 'YYYY-MM-DD')",
        Period.HOUR: "to_char({column}, 'YYYY-MM-DD HH24')",
        Period.MINUTE: "to_char({column}, 'YYYY-MM-DD HH24:MI')",
    },
    "sqlite": {
        Period.YEAR: "strftime('%Y', {column})",
        Period.MONTH: "strftime('%Y-%m', {column})",
        Period.WEEK: (
            f"strftime('%Y', {_SQLITE_ISO_THURSDAY}) || "
            f"printf('%02d', (strftime('%j', {_SQLITE_ISO_THURSDAY}) + 6) / 7)"
        ),
        Period.DAY: "strftime('%Y-%m-%d', {column})",
        Period.HOUR: "strftime('%Y-%m-%d %H', {column})",
        Period.MINUTE: "strftime('%Y-%m-%d %H:%M', {column})",
    },
    "mysql": {
        Period.YEAR: "date_format({column}, '%Y')",
        Period.MONTH: "date_format({column}, '%Y-%m')",
        Period.WEEK: "yearweek({column}, 3)",
        Period.DAY: "date_format({column}, '%Y-%m-%d')",
        Period.HOUR: "date_format({column}, '%Y-%m-%d %H')",
        Period.MINUTE: "date_format({column}, '%Y-%m-%d %H:%i')",
    },
}
_TRUNCATIONS["mariadb"] = _TRUNCATIONS["mysql"]

SUPPORTED_DIALECTS = frozenset(_TRUNCATIONS)


def truncation_sql(dialect_name: str, period: Period, column_name: str) -> str:
    """Return the raw SQL truncating ``column_name`` for ``dialect_name``."""

    try:
        templates = _TRUNCATIONS[dialect_name]
    except KeyError:
        raise CapabilityError(
            f"Period truncation is not available for the {dialect_name!r} dialect"
        ) from None
    return templates[Period.parse(period)].format(column=column_name)


def period_key_expression(
    dialect_name: str, period: Period, column: sa.ColumnElement
) -> sa.ColumnElement[str]:
    """Column expression producing the bucket key of ``column``."""

    return sa.literal_column(
        truncation_sql(dialect_name, period, column.name), type_=sa.String
    )


__all__ = ["SUPPORTED_DIALECTS", "period_key_expression", "truncation_sql"]
