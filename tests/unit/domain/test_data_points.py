from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from statkeeper.domain.clock import as_utc, epoch_ms, resolve_timestamp
from statkeeper.domain.models import CounterDataPoint, TimeDataPoint, round_half_up

START = datetime(2020, 1, 1)
END = datetime(2020, 1, 2)


def _point(**overrides) -> TimeDataPoint:
    values = dict(
        start=START,
        end=END,
        count=3,
        total_duration_ms=100000,
        average_duration_ms=33333,
        min_duration_ms=30000,
        max_duration_ms=40000,
        average_seconds=33.33,
        average_minutes=0.56,
    )
    values.update(overrides)
    return TimeDataPoint(**values)


@pytest.mark.unit
def test_from_aggregate_truncates_average_and_rounds_derived_units() -> None:
    point = TimeDataPoint.from_aggregate(
        START,
        END,
        {
            "count": 3,
            "total_duration_ms": 100000,
            "avg_duration_ms": 33333.333,
            "min_duration_ms": 30000,
            "max_duration_ms": 40000,
        },
    )

    assert point == _point()
    assert point.average_duration_in_seconds() == 33.33
    assert point.average_duration_in_minutes() == 0.56
    assert point.total_duration_in_seconds() == 100.0
    assert point.total_duration_in_minutes() == 1.67


@pytest.mark.unit
def test_empty_point_is_zero_filled() -> None:
    point = TimeDataPoint.empty(START, END)

    assert point.count == 0
    assert point.total_duration_ms == 0
    assert point.average_seconds == 0.0
    assert point.average_minutes == 0.0
    assert (point.start, point.end) == (START, END)


@pytest.mark.unit
def test_to_dict_renders_iso_timestamps() -> None:
    assert _point().to_dict() == {
        "start": "2020-01-01T00:00:00",
        "end": "2020-01-02T00:00:00",
        "count": 3,
        "total_duration_ms": 100000,
        "average_duration_ms": 33333,
        "min_duration_ms": 30000,
        "max_duration_ms": 40000,
        "average_seconds": 33.33,
        "average_minutes": 0.56,
    }


@pytest.mark.unit
def test_data_points_are_immutable() -> None:
    point = _point()
    with pytest.raises(dataclasses.FrozenInstanceError):
        point.count = 4  # type: ignore[misc]

    series = CounterDataPoint(START, END, value=5, increments=6, decrements=1, difference=5)
    assert series.to_dict()["difference"] == 5


@pytest.mark.unit
def test_round_half_up_rounds_midpoints_away_from_zero() -> None:
    assert round_half_up(0.125) == 0.13
    assert round_half_up(2.5, 0) == 3.0


@pytest.mark.unit
def test_clock_helpers_normalise_to_naive_utc() -> None:
    aware = datetime(2020, 1, 1, 14, tzinfo=timezone(timedelta(hours=2)))

    assert as_utc(aware) == datetime(2020, 1, 1, 12)
    assert resolve_timestamp(None, lambda: aware) == datetime(2020, 1, 1, 12)
    assert epoch_ms(datetime(1970, 1, 1, 0, 0, 1, 500)) == 1000
    assert epoch_ms(datetime(2020, 1, 1, 0, 5)) - epoch_ms(datetime(2020, 1, 1)) == 300000
