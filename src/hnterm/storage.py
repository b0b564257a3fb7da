"""JSON files under ~/.config/hnterm for bookmarks, history and searches."""

import json
from datetime import datetime, timezone
from pathlib import Path

from hnterm.errors import StorageError

DATA_DIR = Path.home() / ".config" / "hnterm"


def data_path(name: str) -> Path:
    """Return the path of a data file, creating the data directory if needed."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    return DATA_DIR / name


def read_json(path: Path):
    """Return the decoded contents of ``path``, or None if it does not exist."""
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text())
    except OSError as exc:
        raise StorageError(f"Failed to read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise StorageError(f"Failed to parse {path}: {exc}") from exc


def write_json(path: Path, data) -> None:
    try:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False))
    except OSError as exc:
        raise StorageError(f"Failed to write {path}: {exc}") from exc


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def read_records(path: Path, key: str, factory=None) -> list:
    """Return the list stored under ``key`` in ``path``, built with ``factory`` if given.

    A missing file gives an empty list; a file of the wrong shape raises StorageError.
    """
    data = read_json(path)
    if data is None:
        return []
    try:
        items = data.get(key, [])
        if not isinstance(items, list):
            raise TypeError(f"{key!r} is not a list")
        return [factory(**item) for item in items] if factory else list(items)
    except (TypeError, AttributeError) as exc:
        raise StorageError(f"Malformed data in {path}: {exc}") from exc
