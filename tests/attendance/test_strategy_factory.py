from datetime import time

import pytest

from kindergarten.attendance.factory import AttendanceStrategyFactory, parse_status
from kindergarten.attendance.strategies.absent_strategy import AbsentStrategy
from kindergarten.attendance.strategies.late_strategy import LateStrategy
from kindergarten.attendance.strategies.present_strategy import PresentStrategy
from kindergarten.core.enums import AttendanceStatus
from kindergarten.core.exceptions import ValidationError


def test_factory_picks_strategy_per_status():
    factory = AttendanceStrategyFactory()

    assert isinstance(factory.for_status("PRESENT"), PresentStrategy)
    assert isinstance(factory.for_status("late"), LateStrategy)
    assert isinstance(factory.for_status(AttendanceStatus.ABSENT), AbsentStrategy)


@pytest.mark.parametrize("value", [None, "", "   "])
def test_missing_status_is_rejected(value):
    with pytest.raises(ValidationError, match="bắt buộc"):
        parse_status(value)


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError, match="PRESENT, ABSENT hoặc LATE"):
        parse_status("EXCUSED")


def test_present_defaults_check_in_to_now_and_clears_late_time():
    times = PresentStrategy().normalize(check_in_time=None, late_arrival_time=time(9, 0), now=time(7, 45))

    assert times.status == AttendanceStatus.PRESENT
    assert times.check_in_time == time(7, 45)
    assert times.late_arrival_time is None


def test_late_uses_arrival_as_check_in_when_missing():
    times = LateStrategy().normalize(check_in_time=None, late_arrival_time=time(9, 10), now=time(10, 0))

    assert times.check_in_time == time(9, 10)
    assert times.late_arrival_time == time(9, 10)


def test_late_without_times_uses_now():
    times = LateStrategy().normalize(check_in_time=None, late_arrival_time=None, now=time(8, 30))

    assert times.check_in_time == time(8, 30)
    assert times.late_arrival_time == time(8, 30)


def test_absent_clears_times():
    times = AbsentStrategy().normalize(check_in_time=time(8, 0), late_arrival_time=time(9, 0), now=time(10, 0))

    assert times.check_in_time is None
    assert times.late_arrival_time is None


@pytest.mark.parametrize("strategy", [PresentStrategy(), LateStrategy(), AbsentStrategy()])
def test_normalizing_twice_changes_nothing(strategy):
    first = strategy.normalize(check_in_time=None, late_arrival_time=None, now=time(8, 15))
    second = strategy.normalize(
        check_in_time=first.check_in_time,
        late_arrival_time=first.late_arrival_time,
        now=time(11, 0),
    )

    assert second == first
