"""Translate scope criteria into SQLAlchemy conditions."""

from __future__ import annotations

from typing import Any, Mapping

import sqlalchemy as sa

from ..exceptions import ValidationError


def ensure_columns(table: sa.Table, attributes: Mapping[str, Any]) -> None:
    """Reject scope attributes that are not columns of ``table``."""

    unknown = sorted(key for key in attributes if key not in table.c)
    if unknown:
        raise ValidationError(
            f"Unknown scope column(s) for {table.name!r}: {', '.join(unknown)}"
        )


def equality_conditions(
    table: sa.Table, criteria: Mapping[str, Any]
) -> list[sa.ColumnElement[bool]]:
    """One condition per criterion; ``None`` values match ``IS NULL``."""

    conditions: list[sa.ColumnElement[bool]] = []
    for key, value in criteria.items():
        column = table.c[key]
        if value is None:
            conditions.append(column.is_(None))
        else:
            conditions.append(column == value)
    return conditions


__all__ = ["ensure_columns", "equality_conditions"]
