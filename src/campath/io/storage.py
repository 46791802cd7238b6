from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from ..core.errors import DirectoryNotFound, FileNotFound


logger = logging.getLogger(__name__)


def ensure_json_suffix(path: str | Path) -> str:
    """Append `.json` unless the path already ends with it (any case)."""
    p = str(path)
    if not p.lower().endswith(".json"):
        p = p + ".json"
    return p


class Storage(Protocol):
    def read_text(self, path: str | Path) -> str: ...

    def write_text(self, path: str | Path, text: str) -> None: ...

    def list_files(self, directory: str | Path, pattern: str = "*.json") -> list[str]: ...

    def resolve(self, path: str | Path) -> str: ...


class LocalStorage:
    """UTF-8 text storage on the local filesystem.

    Relative paths resolve against `root` when one is given.
    """

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root) if root is not None else None

    def _resolve(self, path: str | Path) -> Path:
        p = Path(path).expanduser()
        if self.root is not None and not p.is_absolute():
            p = self.root / p
        return p

    def resolve(self, path: str | Path) -> str:
        return str(self._resolve(path))

    def read_text(self, path: str | Path) -> str:
        p = self._resolve(path)
        if not p.is_file():
            raise FileNotFound(f"JSON file not found: {p}")
        return p.read_text(encoding="utf-8")

    def write_text(self, path: str | Path, text: str) -> None:
        p = self._resolve(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        logger.debug("Wrote %d characters to %s", len(text), p)

    def list_files(self, directory: str | Path, pattern: str = "*.json") -> list[str]:
        d = self._resolve(directory)
        if not d.is_dir():
            raise DirectoryNotFound(f"Folder {d} does not exist")
        # Sorted so that load order (the only identity of a loaded path) is stable.
        return [str(p) for p in sorted(d.glob(pattern)) if p.is_file()]
