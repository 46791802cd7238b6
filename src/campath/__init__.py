from __future__ import annotations

from .client import CameraPathClient
from .core import (
    CameraPathError,
    CameraPathSession,
    DirectoryNotFound,
    FileNotFound,
    FixedStepClock,
    IndexOutOfRange,
    InsufficientKeyframes,
    InvalidParameter,
    Keyframe,
    MonotonicClock,
    ParseError,
    PlaybackDriver,
    PlaybackState,
    Pose,
    Trajectory,
    VirtualCamera,
    sample,
    sample_frames,
)
from .io import CallbackFrameSink, LocalStorage
from .settings import CameraPathSettings

__all__ = [
    "CameraPathClient",
    "CameraPathSession",
    "CameraPathSettings",
    "CameraPathError",
    "InsufficientKeyframes",
    "InvalidParameter",
    "IndexOutOfRange",
    "ParseError",
    "FileNotFound",
    "DirectoryNotFound",
    "Keyframe",
    "Pose",
    "Trajectory",
    "sample",
    "sample_frames",
    "PlaybackDriver",
    "PlaybackState",
    "VirtualCamera",
    "MonotonicClock",
    "FixedStepClock",
    "LocalStorage",
    "CallbackFrameSink",
]
