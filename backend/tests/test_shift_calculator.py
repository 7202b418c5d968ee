from datetime import date, datetime, time

import pytest

from app.services import shift_calculator
from app.services.auto_generation_job import calculate_next_run


def test_overnight_shift_ends_next_day():
    start, end = shift_calculator.build_shift_times(date(2024, 1, 1), time(20, 0), time(6, 0))

    assert start == datetime(2024, 1, 1, 20, 0)
    assert end == datetime(2024, 1, 2, 6, 0)


def test_flagged_crossing_moves_end_even_when_end_after_start():
    _, end = shift_calculator.build_shift_times(date(2024, 1, 1), time(6, 0), time(7, 0), True)

    assert end == datetime(2024, 1, 2, 7, 0)


def test_night_split_for_20_to_06():
    start = datetime(2024, 1, 1, 20, 0)
    end = datetime(2024, 1, 2, 6, 0)

    assert shift_calculator.calculate_night_hours(start, end) == 8.0
    assert shift_calculator.calculate_day_hours(start, end) == 2.0


@pytest.mark.parametrize("start, end, night", [
    (datetime(2024, 1, 1, 8, 0), datetime(2024, 1, 1, 17, 0), 0.0),
    (datetime(2024, 1, 1, 4, 0), datetime(2024, 1, 1, 8, 0), 2.0),
    (datetime(2024, 1, 1, 22, 0), datetime(2024, 1, 2, 6, 0), 8.0),
    (datetime(2024, 1, 1, 21, 30), datetime(2024, 1, 1, 22, 45), 0.75),
    (datetime(2024, 1, 1, 0, 0), datetime(2024, 1, 3, 0, 0), 16.0),
])
def test_night_hours(start, end, night):
    assert shift_calculator.calculate_night_hours(start, end) == night


def test_night_flag():
    assert shift_calculator.is_night_shift(time(22, 0), time(6, 0))
    assert shift_calculator.is_night_shift(time(18, 0), time(6, 0))
    assert not shift_calculator.is_night_shift(time(8, 0), time(17, 0))


def test_date_parts_use_iso_week_and_monday_first():
    parts = shift_calculator.date_parts(date(2024, 12, 29))

    assert parts["day_of_week"] == 7
    assert parts["shift_week"] == 52
    assert parts["shift_quarter"] == 4

    assert shift_calculator.date_parts(date(2024, 12, 30))["shift_week"] == 1
    assert shift_calculator.date_parts(date(2024, 1, 1))["day_of_week"] == 1


def test_next_run_same_day_before_run_time():
    now = datetime(2024, 1, 1, 1, 30)

    assert calculate_next_run(now, time(2, 0)) == datetime(2024, 1, 1, 2, 0)


def test_next_run_moves_to_tomorrow_after_run_time():
    now = datetime(2024, 1, 1, 2, 0)

    assert calculate_next_run(now, time(2, 0)) == datetime(2024, 1, 2, 2, 0)
