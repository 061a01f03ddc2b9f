# tests/test_support.py

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone

from mirutasu.clock import (
    completion_rate,
    day_bounds,
    local_date_of,
    local_to_utc,
    local_today,
    to_utc_naive,
    week_bounds,
)
from mirutasu.config import load_settings
from mirutasu.logging_setup import setup_logging
from mirutasu.security import generate_id, hash_password, verify_password


# ---- clock ----
def test_completion_rate_rounds_half_up():
    assert completion_rate(0, 0) == 0
    assert completion_rate(1, 3) == 33
    assert completion_rate(2, 3) == 67
    assert completion_rate(1, 8) == 13
    assert completion_rate(5, 5) == 100


def test_to_utc_naive():
    aware = datetime(2026, 10, 20, 9, 0, tzinfo=timezone(timedelta(hours=9)))
    assert to_utc_naive(aware) == datetime(2026, 10, 20, 0, 0)
    assert to_utc_naive(datetime(2026, 10, 20, 9, 0)) == datetime(2026, 10, 20, 9, 0)
    assert to_utc_naive(None) is None


def test_local_day_in_tokyo():
    now = datetime(2026, 10, 17, 16, 30)  # 01:30 on the 18th in Tokyo
    assert local_today("Asia/Tokyo", now) == date(2026, 10, 18)
    assert local_today("UTC", now) == date(2026, 10, 17)
    assert local_date_of(now, "Asia/Tokyo") == date(2026, 10, 18)
    assert local_to_utc(date(2026, 10, 18), time(21, 0), "Asia/Tokyo") == datetime(2026, 10, 18, 12, 0)


def test_day_bounds_are_half_open_utc():
    start, end = day_bounds(date(2026, 10, 18), "Asia/Tokyo")
    assert start == datetime(2026, 10, 17, 15, 0)
    assert end == datetime(2026, 10, 18, 15, 0)


def test_week_starts_on_sunday():
    # Wednesday 2026-10-21 belongs to the week of Sunday the 18th
    start, end = week_bounds(date(2026, 10, 21), "UTC")
    assert start == datetime(2026, 10, 18)
    assert end == datetime(2026, 10, 25)
    assert week_bounds(date(2026, 10, 18), "UTC")[0] == datetime(2026, 10, 18)
    assert week_bounds(date(2026, 10, 24), "UTC")[0] == datetime(2026, 10, 18)


# ---- security ----
def test_generate_id_shape():
    ident = generate_id()
    assert len(ident) == 15
    assert ident.isalnum() and ident == ident.lower()
    assert len(generate_id(40)) == 40


def test_password_hashing():
    pw_hash = hash_password("correct-horse-1", rounds=4)
    assert verify_password("correct-horse-1", pw_hash)
    assert not verify_password("correct-horse-2", pw_hash)
    assert not verify_password("correct-horse-1", "not-a-bcrypt-hash")


def test_long_passwords_are_not_truncated():
    base = "x" * 80
    pw_hash = hash_password(base + "a", rounds=4)
    assert not verify_password(base + "b", pw_hash)


# ---- config ----
def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MIRUTASU_ENVIRONMENT", "Production")
    monkeypatch.setenv("MIRUTASU_TIMEZONE", "Asia/Tokyo")
    monkeypatch.setenv("MIRUTASU_SESSION_DAYS", "0")
    monkeypatch.setenv("MIRUTASU_BCRYPT_ROUNDS", "nope")
    monkeypatch.setenv("MIRUTASU_CORS_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("MIRUTASU_SEED_GAMES", "off")
    monkeypatch.setenv("MIRUTASU_LOG_LEVEL", "debug")

    s = load_settings()
    assert s.environment == "production" and s.is_production
    assert s.timezone == "Asia/Tokyo"
    assert s.session_days == 1
    assert s.bcrypt_rounds == 12
    assert s.cors_origins == ["https://a.example", "https://b.example"]
    assert s.seed_games is False
    assert s.log_level == "DEBUG"
    assert s.log_file is None


def test_unknown_timezone_falls_back_to_utc(monkeypatch, tmp_path, caplog):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MIRUTASU_TIMEZONE", "Mars/Olympus")

    with caplog.at_level(logging.WARNING, logger="mirutasu.config"):
        s = load_settings()
    assert s.timezone == "UTC"
    assert "Mars/Olympus" in caplog.text
    local_today(s.timezone)


# ---- logging ----
def test_setup_logging_file_handler(tmp_path):
    log_file = tmp_path / "logs" / "mirutasu.log"
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("info", log_file)
        logging.getLogger("mirutasu.test").debug("hello file")
        for h in root.handlers:
            h.flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
