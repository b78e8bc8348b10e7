from __future__ import annotations

from datetime import date

from illustration_engine.domain.validation import calculate_age


def test_birthday_today_counts_as_completed():
    assert calculate_age(date(1990, 6, 15), today=date(2025, 6, 15)) == 35


def test_birthday_tomorrow_is_not_yet_completed():
    assert calculate_age(date(1990, 6, 16), today=date(2025, 6, 15)) == 34


def test_birthday_later_month_is_not_yet_completed():
    assert calculate_age(date(1990, 7, 1), today=date(2025, 6, 15)) == 34


def test_birthday_earlier_month_is_completed():
    assert calculate_age(date(1990, 5, 31), today=date(2025, 6, 15)) == 35


def test_leap_day_birthday_waits_for_march_in_common_years():
    assert calculate_age(date(2000, 2, 29), today=date(2025, 2, 28)) == 24
    assert calculate_age(date(2000, 2, 29), today=date(2025, 3, 1)) == 25


def test_recomputing_age_gives_same_answer():
    dob, today = date(1988, 12, 31), date(2025, 1, 1)
    assert calculate_age(dob, today) == calculate_age(dob, today) == 36


def test_today_defaults_to_current_date():
    current = date.today()
    dob = date(current.year - 40, 1, 1)
    assert calculate_age(dob) == 40
