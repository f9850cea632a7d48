"""SQLite backend strategy implementation."""

from __future__ import annotations

from pathlib import Path

from ecb_rates.db import DEFAULT_SQLITE_DB_PATH
from ecb_rates.db.relational_backend import RelationalBackend


class SQLiteBackend(RelationalBackend):
    """Relational backend bound to an on-disk SQLite file."""

    def __init__(self, db_path: str | Path = DEFAULT_SQLITE_DB_PATH) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        super().__init__(f"sqlite:///{self.db_path.as_posix()}")

    def _engine_options(self) -> dict[str, object]:
        # Request handlers run on a threadpool; each call opens its own session.
        return {"connect_args": {"check_same_thread": False}}


__all__ = ["SQLiteBackend"]
