from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from .errors import InvalidParameter
from .geometry import WORLD_UP, Vec3, as_vec3, look_at_quaternion
from .keyframe import Keyframe, Pose


logger = logging.getLogger(__name__)

DEFAULT_TOTAL_DURATION = 5.0
DEFAULT_FPS = 30
DEFAULT_SCALE = 1.0


@dataclass(frozen=True)
class SphereSettings:
    """Sphere used by the last spherical generation, kept for visualization."""

    center: Vec3
    radius: float


@dataclass
class Trajectory:
    """Time-indexed keyframes plus the global timing and scale parameters.

    Keyframes are kept in insertion order. Ordering by time is only established
    by an explicit `sort()`.
    """

    keyframes: list[Keyframe] = field(default_factory=list)
    total_duration: float = DEFAULT_TOTAL_DURATION
    fps: int = DEFAULT_FPS
    scale: float = DEFAULT_SCALE
    sphere: SphereSettings | None = None

    def __post_init__(self) -> None:
        self.set_total_duration(self.total_duration)
        self.set_fps(self.fps)
        self.set_scale(self.scale)

    def __len__(self) -> int:
        return len(self.keyframes)

    @property
    def first(self) -> Keyframe | None:
        return self.keyframes[0] if self.keyframes else None

    @property
    def last(self) -> Keyframe | None:
        return self.keyframes[-1] if self.keyframes else None

    def set_total_duration(self, value: float) -> None:
        v = float(value)
        if not np.isfinite(v) or v < 0.0:
            raise InvalidParameter("total_duration must be a finite number >= 0")
        self.total_duration = v

    def set_fps(self, value: int) -> None:
        if isinstance(value, bool):
            raise InvalidParameter("fps must be a positive integer")
        try:
            v = int(value)
        except (TypeError, ValueError) as ex:
            raise InvalidParameter("fps must be a positive integer") from ex
        if v <= 0 or v != value:
            raise InvalidParameter("fps must be a positive integer")
        self.fps = v

    def set_scale(self, value: float) -> None:
        v = float(value)
        if not np.isfinite(v) or v <= 0.0:
            raise InvalidParameter("scale must be a finite positive number")
        self.scale = v

    def add_keyframe(self, pose: Pose) -> Keyframe:
        t = self.keyframes[-1].time + 1.0 if self.keyframes else 0.0
        kf = Keyframe.from_pose(t, pose)
        self.keyframes.append(kf)
        logger.info("Added keyframe at time %.2fs", kf.time)
        return kf

    def remove_keyframe(self, index: int) -> bool:
        # Out-of-range indices are ignored rather than reported.
        if 0 <= index < len(self.keyframes):
            del self.keyframes[index]
            return True
        return False

    def clear(self) -> None:
        self.keyframes.clear()

    def sort(self) -> None:
        # list.sort is stable, so equal times keep their insertion order.
        self.keyframes.sort(key=lambda k: k.time)
        if self.keyframes:
            self.total_duration = float(self.keyframes[-1].time)

    def generate_spherical(
        self,
        center: np.ndarray | tuple[float, float, float] | list[float],
        radius: float,
        count: int,
        camera: Pose,
        *,
        rng: np.random.Generator | None = None,
    ) -> list[Keyframe]:
        """Replace the keyframes with `count` random views on a sphere looking at its center.

        Directions are drawn uniformly over the sphere surface (theta = 2*pi*u,
        phi = acos(2v - 1)) and keyframes are spread evenly over the current
        total duration. Lens values are copied from `camera`.
        """

        if int(count) < 1:
            logger.warning("Number of keyframes must be greater than 0, got %s", count)
            raise InvalidParameter("count must be >= 1")
        radius_f = float(radius)
        if not np.isfinite(radius_f) or radius_f <= 0.0:
            logger.warning("Sphere radius must be greater than 0, got %s", radius)
            raise InvalidParameter("radius must be a finite number > 0")
        n = int(count)
        c = np.asarray(as_vec3(center), dtype=np.float64)
        if not np.all(np.isfinite(c)):
            raise InvalidParameter("center must contain finite numeric values")

        rng = rng if rng is not None else np.random.default_rng()
        time_step = self.total_duration / float(n - 1 if n > 1 else 1)

        generated: list[Keyframe] = []
        for i in range(n):
            u = float(rng.random())
            v = float(rng.random())
            theta = 2.0 * np.pi * u
            phi = float(np.arccos(2.0 * v - 1.0))

            offset = radius_f * np.array(
                [np.sin(phi) * np.cos(theta), np.cos(phi), np.sin(phi) * np.sin(theta)],
                dtype=np.float64,
            )
            position = c + offset
            rotation = look_at_quaternion(position, c, WORLD_UP)

            generated.append(
                Keyframe(
                    time=float(i) * time_step,
                    position=as_vec3(position),
                    rotation=rotation,
                    fov=float(camera.fov),
                    near=float(camera.near),
                    far=float(camera.far),
                )
            )
            logger.debug("Added keyframe %d on sphere at (%.2f, %.2f, %.2f)", i, *position.tolist())

        self.keyframes = generated
        self.total_duration = generated[-1].time if n > 1 else 0.0
        self.sphere = SphereSettings(center=as_vec3(c), radius=radius_f)
        logger.info(
            "Generated %d random keyframes on sphere, center: %s, radius: %s",
            n,
            as_vec3(c),
            radius_f,
        )
        return list(generated)

    def positions(self) -> np.ndarray:
        """Keyframe positions as an (N, 3) float64 array, in stored order."""
        if not self.keyframes:
            return np.empty((0, 3), dtype=np.float64)
        return np.asarray([k.position for k in self.keyframes], dtype=np.float64)

    def copy(self) -> "Trajectory":
        return Trajectory(
            keyframes=[Keyframe(**vars(k)) for k in self.keyframes],
            total_duration=self.total_duration,
            fps=self.fps,
            scale=self.scale,
            sphere=self.sphere,
        )
