from __future__ import annotations

import logging
import threading
from pathlib import Path

import numpy as np

from . import codec
from .camera import Clock, Renderer, VirtualCamera
from .codec import LoadedPath
from .keyframe import Keyframe, Pose
from .playback import PlaybackDriver, PlaybackState
from .sampler import sample
from .trajectory import Trajectory
from ..io.frames import FrameSink
from ..io.storage import LocalStorage, Storage
from ..settings import CameraPathSettings


logger = logging.getLogger(__name__)


class CameraPathSession:
    """Owns the live trajectory, its playback driver and the loaded path set.

    All public methods take the same re-entrant lock, so a session can be
    shared between the HTTP worker threads and a render loop.
    """

    def __init__(
        self,
        renderer: Renderer | None = None,
        *,
        storage: Storage | None = None,
        clock: Clock | None = None,
        settings: CameraPathSettings | None = None,
        rng: np.random.Generator | None = None,
        trajectory: Trajectory | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self.renderer: Renderer = renderer if renderer is not None else VirtualCamera()
        self.storage: Storage = storage if storage is not None else LocalStorage()
        self.settings = settings if settings is not None else CameraPathSettings()
        self._rng = rng if rng is not None else np.random.default_rng()
        self._trajectory = trajectory if trajectory is not None else Trajectory()
        self._driver = PlaybackDriver(self._trajectory, self.renderer, clock)
        self._paths: list[LoadedPath] = []
        self._revision = 0

    def _bump_locked(self) -> None:
        self._revision += 1

    @property
    def revision(self) -> int:
        with self._lock:
            return int(self._revision)

    @property
    def trajectory(self) -> Trajectory:
        return self._trajectory

    @property
    def driver(self) -> PlaybackDriver:
        return self._driver

    def trajectory_copy(self) -> Trajectory:
        with self._lock:
            return self._trajectory.copy()

    def _replace_trajectory_locked(self, trajectory: Trajectory) -> None:
        self._trajectory = trajectory
        self._driver.trajectory = trajectory
        self._bump_locked()

    # Keyframe editing

    def keyframes(self) -> list[Keyframe]:
        with self._lock:
            return [Keyframe(**vars(k)) for k in self._trajectory.keyframes]

    def add_keyframe(self) -> tuple[int, Keyframe]:
        """Append a keyframe from the live camera. Returns its index and the keyframe."""
        with self._lock:
            kf = self._trajectory.add_keyframe(self.renderer.get_current_pose())
            self._bump_locked()
            return len(self._trajectory.keyframes) - 1, kf

    def remove_keyframe(self, index: int) -> bool:
        with self._lock:
            removed = self._trajectory.remove_keyframe(index)
            if removed:
                self._bump_locked()
            return removed

    def clear_keyframes(self) -> None:
        with self._lock:
            self._trajectory.clear()
            self._bump_locked()

    def sort_keyframes(self) -> None:
        with self._lock:
            self._trajectory.sort()
            self._bump_locked()

    def generate_spherical(
        self,
        center: np.ndarray | tuple[float, float, float] | list[float],
        radius: float,
        count: int,
    ) -> list[Keyframe]:
        with self._lock:
            out = self._trajectory.generate_spherical(
                center,
                radius,
                count,
                self.renderer.get_current_pose(),
                rng=self._rng,
            )
            self._bump_locked()
            return out

    def update_parameters(
        self,
        *,
        total_duration: float | None = None,
        fps: int | None = None,
        scale: float | None = None,
    ) -> Trajectory:
        with self._lock:
            # Validate everything on a copy first so a bad value changes nothing.
            staged = Trajectory(
                total_duration=self._trajectory.total_duration if total_duration is None else total_duration,
                fps=self._trajectory.fps if fps is None else fps,
                scale=self._trajectory.scale if scale is None else scale,
            )
            self._trajectory.total_duration = staged.total_duration
            self._trajectory.fps = staged.fps
            self._trajectory.scale = staged.scale
            self._bump_locked()
            return self._trajectory

    # Sampling and playback

    def sample(self, t: float) -> Pose:
        with self._lock:
            return sample(self._trajectory, t)

    def current_pose(self) -> Pose:
        with self._lock:
            return self.renderer.get_current_pose()

    def set_camera_pose(self, pose: Pose) -> None:
        with self._lock:
            self.renderer.set_pose(pose)

    def play(self) -> None:
        with self._lock:
            self._driver.play()

    def stop(self) -> None:
        with self._lock:
            self._driver.stop()

    def tick(self, elapsed: float | None = None) -> Pose | None:
        with self._lock:
            return self._driver.tick(elapsed)

    def seek(self, t: float) -> Pose:
        with self._lock:
            return self._driver.seek(t)

    def move_to_keyframe(self, index: int) -> Pose:
        with self._lock:
            return self._driver.move_to_keyframe(index)

    def playback_state(self) -> tuple[PlaybackState, float]:
        with self._lock:
            return self._driver.state, float(self._driver.timer)

    def debug_info(self) -> str:
        with self._lock:
            return self._driver.debug_info()

    def export_frames(
        self,
        sink: FrameSink,
        directory: str | Path | None = None,
        prefix: str | None = None,
        **kwargs,
    ) -> list[str]:
        with self._lock:
            return self._driver.export_frames(
                sink,
                self.storage.resolve(directory if directory is not None else self.settings.export_dir),
                prefix if prefix is not None else self.settings.frame_prefix,
                **kwargs,
            )

    # JSON import / export

    def import_json(self, path: str | Path, *, look_at_up: bool = False) -> Trajectory:
        # Parse fully before touching the live trajectory.
        loaded = codec.load_trajectory(self.storage, path, look_at_up=look_at_up)
        with self._lock:
            self._replace_trajectory_locked(loaded)
            return loaded

    def export_json(self, path: str | Path, *, look_at_up: bool = False) -> str:
        with self._lock:
            return codec.save_trajectory(
                self.storage,
                path,
                self._trajectory,
                look_at_up=look_at_up,
                camera=self.renderer.get_current_pose(),
                aspect=self.settings.aspect,
            )

    def export_full_path(self, path: str | Path, *, look_at_up: bool = False) -> str:
        with self._lock:
            return codec.save_full_path(
                self.storage,
                path,
                self._trajectory,
                look_at_up=look_at_up,
                camera=self.renderer.get_current_pose(),
                aspect=self.settings.aspect,
            )

    # Multi-path visualization

    def load_paths(self, directory: str | Path | None = None, *, look_at_up: bool = False) -> list[LoadedPath]:
        target = directory if directory is not None else self.settings.json_dir
        loaded = codec.load_trajectory_set(self.storage, target, look_at_up=look_at_up)
        with self._lock:
            self._paths = loaded
            self._bump_locked()
            return list(self._paths)

    def clear_paths(self) -> None:
        with self._lock:
            self._paths = []
            self._bump_locked()
        logger.info("Cleared all multi-camera paths.")

    def paths(self) -> list[LoadedPath]:
        with self._lock:
            return list(self._paths)
