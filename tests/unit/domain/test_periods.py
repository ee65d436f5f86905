from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from statkeeper.domain.periods import (
    Period,
    advance,
    generate_periods,
    period_key,
    truncate,
)
from statkeeper.exceptions import ValidationError

MOMENT = datetime(2020, 1, 15, 13, 47, 12, 500000)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("period", "expected"),
    [
        (Period.MINUTE, datetime(2020, 1, 15, 13, 47)),
        (Period.HOUR, datetime(2020, 1, 15, 13)),
        (Period.DAY, datetime(2020, 1, 15)),
        (Period.WEEK, datetime(2020, 1, 13)),
        (Period.MONTH, datetime(2020, 1, 1)),
        (Period.YEAR, datetime(2020, 1, 1)),
    ],
)
def test_truncate_rounds_down_to_period_start(period: Period, expected: datetime) -> None:
    assert truncate(MOMENT, period) == expected


@pytest.mark.unit
def test_advance_months_rolls_over_years() -> None:
    assert advance(datetime(2019, 12, 1), Period.MONTH) == datetime(2020, 1, 1)
    assert advance(datetime(2020, 1, 1), Period.MONTH, 13) == datetime(2021, 2, 1)


@pytest.mark.unit
def test_period_keys_use_canonical_formats() -> None:
    assert period_key(MOMENT, Period.YEAR) == "2020"
    assert period_key(MOMENT, Period.MONTH) == "2020-01"
    assert period_key(MOMENT, Period.DAY) == "2020-01-15"
    assert period_key(MOMENT, Period.HOUR) == "2020-01-15 13"
    assert period_key(MOMENT, Period.MINUTE) == "2020-01-15 13:47"
    assert period_key(MOMENT, Period.WEEK) == "202003"


@pytest.mark.unit
def test_week_keys_follow_iso_years() -> None:
    # Monday 2019-12-30 opens ISO week 1 of 2020.
    assert period_key(datetime(2019, 12, 30), Period.WEEK) == "202001"
    # Sunday 2021-01-03 closes ISO week 53 of 2020.
    assert period_key(datetime(2021, 1, 3), Period.WEEK) == "202053"


@pytest.mark.unit
def test_generate_periods_covers_range_by_day() -> None:
    end = datetime(2020, 1, 1, 12)
    buckets = list(generate_periods(end - timedelta(days=2), end, Period.DAY))

    assert [bucket.key for bucket in buckets] == [
        "2019-12-30",
        "2019-12-31",
        "2020-01-01",
    ]
    assert buckets[0].start == datetime(2019, 12, 30)
    assert buckets[0].end == buckets[1].start
    assert buckets[-1].end == datetime(2020, 1, 2)


@pytest.mark.unit
def test_generate_periods_yields_one_bucket_for_empty_range() -> None:
    moment = datetime(2020, 1, 1, 12)

    buckets = list(generate_periods(moment, moment, Period.HOUR))

    assert len(buckets) == 1
    assert buckets[0].start == datetime(2020, 1, 1, 12)
    assert buckets[0].end == datetime(2020, 1, 1, 13)


@pytest.mark.unit
def test_generate_periods_by_hour_excludes_end_bucket() -> None:
    end = datetime(2020, 1, 1, 12)

    buckets = list(generate_periods(end - timedelta(hours=3), end, Period.HOUR))

    assert [bucket.start.hour for bucket in buckets] == [9, 10, 11]


@pytest.mark.unit
def test_generate_periods_by_week_starts_on_monday() -> None:
    buckets = list(
        generate_periods(datetime(2019, 12, 18, 12), datetime(2019, 12, 30), Period.WEEK)
    )

    assert [bucket.start for bucket in buckets] == [
        datetime(2019, 12, 16),
        datetime(2019, 12, 23),
    ]
    assert [bucket.key for bucket in buckets] == ["201951", "201952"]


@pytest.mark.unit
def test_period_parse_accepts_names_and_rejects_unknown() -> None:
    assert Period.parse("HOUR") is Period.HOUR
    assert Period.parse(Period.WEEK) is Period.WEEK
    with pytest.raises(ValidationError):
        Period.parse("fortnight")
