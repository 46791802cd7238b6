from __future__ import annotations

from .frames import CallbackFrameSink, FrameSink, frame_path
from .storage import LocalStorage, Storage, ensure_json_suffix

__all__ = [
    "FrameSink",
    "CallbackFrameSink",
    "frame_path",
    "Storage",
    "LocalStorage",
    "ensure_json_suffix",
]
