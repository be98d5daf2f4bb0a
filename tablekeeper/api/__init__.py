"""API routers package."""

from tablekeeper.api import auth, sessions, system, table_requests, tables, users

__all__ = [
    "auth",
    "sessions",
    "system",
    "table_requests",
    "tables",
    "users",
]
