from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from statkeeper.domain.models import CounterDataPoint
from statkeeper.domain.periods import Period
from statkeeper.stats import CounterQuery, CounterRepository


@pytest.fixture
def scope(user_repository: CounterRepository):
    return user_repository.for_owner(7).on(1)


@pytest.mark.unit
def test_value_as_of_replays_events_up_to_the_moment(scope, now) -> None:
    scope.set("balance", 10, at=now - timedelta(days=5))
    scope.increase("balance", 5, at=now - timedelta(days=2))
    scope.increase("balance", 3)

    query = scope.query("balance")

    assert query.get_value(now - timedelta(days=6)) == 0
    assert query.get_value(now - timedelta(days=3)) == 10
    assert query.get_value(now - timedelta(days=2)) == 15
    assert query.get_value() == 18


@pytest.mark.unit
def test_value_without_set_sums_changes(scope) -> None:
    scope.increase("logins", 4)
    scope.decrease("logins")

    assert scope.value("logins") == 3


@pytest.mark.unit
def test_value_of_unknown_counter_is_zero(scope) -> None:
    assert scope.value("never_written") == 0


@pytest.mark.unit
def test_changes_before_a_set_are_discarded(scope, now) -> None:
    scope.increase("balance", 7, at=now - timedelta(days=6))
    scope.set("balance", 10, at=now - timedelta(days=5))

    assert scope.value("balance") == 10


@pytest.mark.unit
def test_events_sharing_a_timestamp_apply_in_insertion_order(scope, now) -> None:
    moment = now - timedelta(hours=1)

    scope.increase("balance", 4, at=moment)
    scope.set("balance", 10, at=moment)
    scope.increase("balance", 2, at=moment)

    assert scope.value("balance") == 12
    assert [event.value for event in scope.query("balance").events()] == [4, 10, 2]


@pytest.mark.unit
def test_increase_then_decrease_nets_to_zero(scope) -> None:
    scope.increase("seats", 6)
    scope.decrease("seats", 6)

    assert scope.value("seats") == 0


@pytest.mark.unit
def test_values_are_scoped_by_owner_and_name(user_repository: CounterRepository, scope) -> None:
    scope.increase("logins", 2)
    scope.increase("logouts", 9)
    user_repository.for_owner(8).on(1).increase("logins", 5)

    assert scope.value("logins") == 2


@pytest.mark.unit
def test_series_tracks_value_and_movement_per_bucket(scope, now) -> None:
    scope.set("balance", 10, at=now - timedelta(days=5))
    scope.increase("balance", 5, at=now - timedelta(days=2))
    scope.decrease("balance", 2, at=now - timedelta(days=2))
    scope.increase("balance", 3, at=now - timedelta(hours=1))

    points = scope.query("balance").start(now - timedelta(days=3)).group_by_day().get()

    assert all(isinstance(point, CounterDataPoint) for point in points)
    assert [point.start for point in points] == [
        datetime(2019, 12, 29),
        datetime(2019, 12, 30),
        datetime(2019, 12, 31),
        datetime(2020, 1, 1),
    ]
    assert [
        (point.value, point.increments, point.decrements, point.difference)
        for point in points
    ] == [
        (10, 0, 0, 0),
        (13, 5, 2, 3),
        (13, 0, 0, 0),
        (16, 3, 0, 3),
    ]
    assert points[-1].value == scope.value("balance")


@pytest.mark.unit
def test_series_difference_reflects_absolute_sets(scope, now) -> None:
    scope.set("balance", 10, at=now - timedelta(days=5))
    scope.set("balance", 4, at=now - timedelta(hours=2))

    points = scope.query("balance").start(now - timedelta(hours=3)).group_by_hour().get()

    assert [(point.value, point.difference) for point in points] == [
        (10, 0),
        (4, -6),
        (4, 0),
    ]
    assert points[1].increments == points[1].decrements == 0


@pytest.mark.unit
def test_builder_calls_return_new_queries(scope, now) -> None:
    query = scope.query("balance")

    hourly = query.group_by_hour().start(now - timedelta(hours=2))

    assert isinstance(hourly, CounterQuery)
    assert query.period is Period.DAY
    assert hourly.period is Period.HOUR
    assert query.bounds() == (now - timedelta(weeks=1), now)
    assert hourly.bounds() == (now - timedelta(hours=2), now)
    assert [bucket.start.hour for bucket in hourly.periods()] == [10, 11]
    assert hourly.criteria == {"user_id": 7, "tenant_id": 1}
