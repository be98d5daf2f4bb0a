"""Sample payloads shared by the test-suite."""

from typing import Any

TEST_PASSWORD = "Str0ngPassword"

SAMPLE_REGISTER_DATA: dict[str, Any] = {
    "username": "alice",
    "email": "alice@example.com",
    "password": TEST_PASSWORD,
    "display_name": "Alice",
}

SAMPLE_TABLE_DATA: dict[str, Any] = {
    "title": "Curse of Strahd",
    "description": "Gothic horror campaign, Thursdays",
    "player_slots": 2,
}

SAMPLE_SESSION_DATA: dict[str, Any] = {
    "title": "Session 1: Death House",
    "scheduled_for": "2026-11-05T18:00:00Z",
}


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
