"""Location of the bundled SQLite database and its SQLAlchemy URL."""

from __future__ import annotations

from pathlib import Path
from typing import Final
from urllib.parse import quote

__all__ = ["DEFAULT_SQLITE_DB_PATH", "sqlite_url"]

# Absolute so an installed package finds the file regardless of the cwd.
DEFAULT_SQLITE_DB_PATH: Final[Path] = Path(__file__).resolve().with_name("dollar_rates.db")


def sqlite_url(path: Path | str = DEFAULT_SQLITE_DB_PATH) -> str:
    """Return a ``sqlite:///`` URL for ``path`` with unsafe characters escaped."""

    return f"sqlite:///{quote(Path(path).as_posix(), safe='/:')}"
