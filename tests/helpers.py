# tests/helpers.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi.testclient import TestClient

PASSWORD = "correct-horse-1"


def signup(client: TestClient, username: str = "alice", email: Optional[str] = None, password: str = PASSWORD) -> dict:
    email = email or f"{username}@example.com"
    res = client.post("/api/auth/signup", json={"email": email, "username": username, "password": password})
    assert res.status_code == 200, res.text
    return res.json()["user"]


def parse_wire(value: str) -> datetime:
    """API timestamps are UTC with a trailing ``Z``."""
    assert value.endswith("Z"), value
    return datetime.fromisoformat(value[:-1]).replace(tzinfo=timezone.utc)
