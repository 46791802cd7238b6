from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Protocol


DEFAULT_FRAME_PREFIX = "frame_"


class FrameSink(Protocol):
    def capture_frame(self, path: str) -> Any:
        """Write the currently rendered frame to an image file at `path`."""
        ...


class CallbackFrameSink:
    """Adapt a plain `capture(path)` callable to the FrameSink interface."""

    def __init__(self, capture: Callable[[str], Any]) -> None:
        self._capture = capture

    def capture_frame(self, path: str) -> Any:
        return self._capture(path)


def frame_path(directory: str | Path, index: int, prefix: str = DEFAULT_FRAME_PREFIX) -> str:
    return str(Path(directory) / f"{prefix}{int(index):03d}.png")
