from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable

from .camera import Clock, MonotonicClock, Renderer
from .errors import IndexOutOfRange, InsufficientKeyframes
from .keyframe import Pose
from .sampler import sample
from .trajectory import Trajectory
from ..io.frames import DEFAULT_FRAME_PREFIX, FrameSink, frame_path


logger = logging.getLogger(__name__)


class PlaybackState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"


@dataclass(frozen=True)
class PlaybackSnapshot:
    timer: float
    state: PlaybackState


class PlaybackDriver:
    """Advances a timer over a trajectory and pushes sampled poses to a renderer.

    The driver never owns the trajectory; callers swap it through the
    `trajectory` attribute when a new one is loaded.
    """

    def __init__(self, trajectory: Trajectory, renderer: Renderer, clock: Clock | None = None) -> None:
        self.trajectory = trajectory
        self.renderer = renderer
        self.clock = clock if clock is not None else MonotonicClock()
        self.timer = 0.0
        self.state = PlaybackState.IDLE

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    def snapshot(self) -> PlaybackSnapshot:
        return PlaybackSnapshot(timer=float(self.timer), state=self.state)

    def restore(self, snap: PlaybackSnapshot) -> None:
        self.timer = float(snap.timer)
        self.state = snap.state

    def _clamp(self, t: float) -> float:
        return min(max(float(t), 0.0), float(self.trajectory.total_duration))

    def _push(self, t: float) -> Pose:
        pose = sample(self.trajectory, t)
        self.renderer.set_pose(pose)
        return pose

    def play(self) -> None:
        n = len(self.trajectory.keyframes)
        if n < 2:
            logger.warning("At least 2 keyframes are required to play, got %d", n)
            raise InsufficientKeyframes(n)
        self.timer = 0.0
        self.state = PlaybackState.PLAYING
        # Discard time accumulated while idle.
        self.clock.elapsed()

    def stop(self) -> None:
        self.state = PlaybackState.IDLE

    def tick(self, elapsed: float | None = None) -> Pose | None:
        """Advance one step. Returns the pose pushed, or None when not playing."""
        if not self.is_playing or len(self.trajectory.keyframes) < 2:
            return None

        dt = float(self.clock.elapsed() if elapsed is None else elapsed)
        self.timer = self._clamp(self.timer + dt)
        pose = self._push(self.timer)

        if self.timer >= self.trajectory.total_duration:
            self.state = PlaybackState.IDLE
        return pose

    def seek(self, t: float) -> Pose:
        target = self._clamp(t)
        pose = self._push(target)
        self.timer = target
        return pose

    def move_to_keyframe(self, index: int) -> Pose:
        keyframes = self.trajectory.keyframes
        if index < 0 or index >= len(keyframes):
            logger.warning("Keyframe index %d is invalid (count=%d)", index, len(keyframes))
            raise IndexOutOfRange(index, len(keyframes))

        kf = keyframes[index]
        pose = kf.pose()
        self.renderer.set_pose(pose)
        self.timer = float(kf.time)
        logger.info("Moved camera to keyframe %d at time %.2fs", index, kf.time)
        return pose

    def debug_info(self) -> str:
        return (
            f"Keyframes: {len(self.trajectory.keyframes)}\n"
            f"Total Duration: {self.trajectory.total_duration:.2f}s\n"
            f"FPS: {self.trajectory.fps}\n"
            f"Playing: {self.is_playing}\n"
            f"Current Time: {self.timer:.2f}s"
        )

    def _export_pose(self, index: int) -> None:
        kf = self.trajectory.keyframes[index]
        self.timer = float(kf.time)
        if len(self.trajectory.keyframes) >= 2:
            self._push(self.timer)
        else:
            self.renderer.set_pose(kf.pose())

    def export_frames(
        self,
        sink: FrameSink,
        directory: str | Path,
        prefix: str = DEFAULT_FRAME_PREFIX,
        *,
        wait_for_render: Callable[[], Any] | None = None,
        cancel: threading.Event | None = None,
    ) -> list[str]:
        """Capture one image per keyframe, in stored order.

        For every keyframe the pose is set, `wait_for_render` is called so the
        host can finish drawing, and only then the sink captures. Timer and play
        state are restored afterwards, whether the loop completes, fails or is
        cancelled.
        """

        count = len(self.trajectory.keyframes)
        if count == 0:
            logger.warning("No keyframes available to export images")
            return []

        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        snap = self.snapshot()
        written: list[str] = []
        logger.info("Starting export of %d images from keyframes", count)
        try:
            for i in range(count):
                if cancel is not None and cancel.is_set():
                    logger.info("Frame export cancelled after %d images", len(written))
                    break
                self._export_pose(i)
                if wait_for_render is not None:
                    wait_for_render()
                path = frame_path(out_dir, i, prefix)
                sink.capture_frame(path)
                written.append(path)
                logger.debug("Exported image for keyframe %d: %s", i, path)
        finally:
            self.restore(snap)
        logger.info("Export of %d images completed at: %s", len(written), out_dir)
        return written

    async def export_frames_async(
        self,
        sink: FrameSink,
        directory: str | Path,
        prefix: str = DEFAULT_FRAME_PREFIX,
        *,
        wait_for_render: Callable[[], Awaitable[Any]] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> list[str]:
        """Async variant of `export_frames`; yields to the loop between pose and capture."""

        count = len(self.trajectory.keyframes)
        if count == 0:
            logger.warning("No keyframes available to export images")
            return []

        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        snap = self.snapshot()
        written: list[str] = []
        logger.info("Starting export of %d images from keyframes", count)
        try:
            for i in range(count):
                if cancel is not None and cancel.is_set():
                    logger.info("Frame export cancelled after %d images", len(written))
                    break
                self._export_pose(i)
                if wait_for_render is not None:
                    await wait_for_render()
                else:
                    await asyncio.sleep(0)
                path = frame_path(out_dir, i, prefix)
                result = sink.capture_frame(path)
                if asyncio.iscoroutine(result):
                    await result
                written.append(path)
        finally:
            self.restore(snap)
        logger.info("Export of %d images completed at: %s", len(written), out_dir)
        return written
