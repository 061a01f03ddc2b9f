# tests/test_recurrence.py

from __future__ import annotations

from datetime import date

import pytest

from mirutasu.recurrence import game_external_id, is_due, recurring_external_id, weekday_code

# 2026-10-18 is a Sunday
ANCHOR = date(2026, 10, 18)


def test_weekday_code():
    assert weekday_code(ANCHOR) == "sun"
    assert weekday_code(date(2026, 10, 19)) == "mon"


def test_nothing_is_due_before_the_anchor():
    assert not is_due("daily", {}, date(2026, 10, 17), ANCHOR)


def test_daily_is_always_due():
    assert is_due("daily", None, ANCHOR, ANCHOR)
    assert is_due("daily", {"days": ["mon"]}, date(2026, 11, 3), ANCHOR)


@pytest.mark.parametrize(
    "day, expected",
    [(date(2026, 10, 24), True), (date(2026, 10, 25), True), (date(2026, 10, 26), False)],
)
def test_weekly_with_days(day, expected):
    assert is_due("weekly", {"days": ["sat", "sun"]}, day, ANCHOR) is expected


def test_weekly_without_days_uses_anchor_weekday():
    assert is_due("weekly", {}, date(2026, 10, 25), ANCHOR)
    assert not is_due("weekly", {}, date(2026, 10, 22), ANCHOR)


def test_custom_interval_counts_from_anchor():
    data = {"interval": 3}
    assert is_due("custom", data, ANCHOR, ANCHOR)
    assert not is_due("custom", data, date(2026, 10, 19), ANCHOR)
    assert is_due("custom", data, date(2026, 10, 21), ANCHOR)


def test_custom_interval_with_days_filter():
    data = {"interval": 2, "days": ["tue"]}
    # every other day from Sunday lands on Tuesday the 20th, not Monday the 19th
    assert is_due("custom", data, date(2026, 10, 20), ANCHOR)
    assert not is_due("custom", data, date(2026, 10, 22), ANCHOR)


def test_unknown_type_is_never_due():
    assert not is_due("monthly", {}, ANCHOR, ANCHOR)


def test_external_ids():
    assert recurring_external_id("abc", ANCHOR) == "recurring:abc:2026-10-18"
    assert game_external_id("fgo", "login_bonus", ANCHOR) == "game:fgo:login_bonus:2026-10-18"
