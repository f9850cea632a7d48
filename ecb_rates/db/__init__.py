"""Store strategies for ecb_rates."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = ["DEFAULT_SQLITE_DB_PATH"]

# Relative on purpose: resolved against the working directory when a backend
# is created, not when the package is imported.
DEFAULT_SQLITE_DB_PATH: Final[Path] = Path("ecb_rates.db")
