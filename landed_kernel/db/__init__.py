"""Database layer - engine, base classes, decimal helpers."""

from landed_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from landed_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from landed_kernel.db.types import (
    format_money,
    parse_money,
    round_money,
)

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "round_money",
    "parse_money",
    "format_money",
]
