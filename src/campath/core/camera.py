from __future__ import annotations

import threading
import time
from typing import Protocol

from .keyframe import Pose


class Renderer(Protocol):
    """Viewport that owns the live camera."""

    def get_current_pose(self) -> Pose: ...

    def set_pose(self, pose: Pose) -> None: ...


class Clock(Protocol):
    def elapsed(self) -> float:
        """Seconds since the previous call."""
        ...


class VirtualCamera:
    """In-memory camera used when no viewport is attached.

    Keeps the last pose it was given and a revision counter so that pollers can
    tell when it moved.
    """

    def __init__(self, pose: Pose | None = None) -> None:
        self._lock = threading.RLock()
        self._pose = pose if pose is not None else Pose()
        self._revision = 0

    def get_current_pose(self) -> Pose:
        with self._lock:
            return self._pose

    def set_pose(self, pose: Pose) -> None:
        with self._lock:
            self._pose = pose
            self._revision += 1

    @property
    def revision(self) -> int:
        with self._lock:
            return int(self._revision)


class MonotonicClock:
    def __init__(self) -> None:
        self._last: float | None = None

    def elapsed(self) -> float:
        now = time.perf_counter()
        if self._last is None:
            self._last = now
            return 0.0
        dt = now - self._last
        self._last = now
        return float(dt)


class FixedStepClock:
    """Clock advancing a constant step per tick, for offline playback."""

    def __init__(self, step: float) -> None:
        if step < 0.0:
            raise ValueError("step must be >= 0")
        self.step = float(step)

    @classmethod
    def for_fps(cls, fps: int) -> "FixedStepClock":
        if int(fps) <= 0:
            raise ValueError("fps must be a positive integer")
        return cls(1.0 / float(fps))

    def elapsed(self) -> float:
        return self.step
