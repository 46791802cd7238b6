from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .geometry import IDENTITY_QUAT, QuatXYZW, Vec3, as_vec3, normalized_quat


DEFAULT_FOV = 60.0
DEFAULT_NEAR = 0.3
DEFAULT_FAR = 1000.0


def validate_lens(fov: float, near: float, far: float) -> tuple[float, float, float]:
    fov_f = float(fov)
    near_f = float(near)
    far_f = float(far)
    if not np.isfinite(fov_f) or fov_f <= 0.0:
        raise ValueError("fov must be a finite positive number")
    if not np.isfinite(near_f) or near_f <= 0.0:
        raise ValueError("near must be a finite positive number")
    if not np.isfinite(far_f) or far_f <= near_f:
        raise ValueError("far must be finite and greater than near")
    return fov_f, near_f, far_f


@dataclass(frozen=True)
class Pose:
    """Full camera state at an instant: placement plus lens."""

    position: Vec3 = (0.0, 0.0, 0.0)
    rotation: QuatXYZW = IDENTITY_QUAT
    fov: float = DEFAULT_FOV
    near: float = DEFAULT_NEAR
    far: float = DEFAULT_FAR

    @classmethod
    def create(
        cls,
        position: np.ndarray | tuple[float, float, float] | list[float],
        rotation: np.ndarray | tuple[float, float, float, float] | list[float] = IDENTITY_QUAT,
        fov: float = DEFAULT_FOV,
        near: float = DEFAULT_NEAR,
        far: float = DEFAULT_FAR,
    ) -> "Pose":
        pos = as_vec3(position)
        if not all(np.isfinite(pos)):
            raise ValueError("position must contain finite numeric values")
        fov_f, near_f, far_f = validate_lens(fov, near, far)
        return cls(position=pos, rotation=normalized_quat(rotation), fov=fov_f, near=near_f, far=far_f)


@dataclass
class Keyframe:
    time: float
    position: Vec3
    rotation: QuatXYZW
    fov: float
    near: float
    far: float

    @classmethod
    def from_pose(cls, time: float, pose: Pose) -> "Keyframe":
        t = float(time)
        if not np.isfinite(t) or t < 0.0:
            raise ValueError("keyframe time must be a finite number >= 0")
        return cls(
            time=t,
            position=as_vec3(pose.position),
            rotation=normalized_quat(pose.rotation),
            fov=float(pose.fov),
            near=float(pose.near),
            far=float(pose.far),
        )

    def pose(self) -> Pose:
        return Pose(
            position=self.position,
            rotation=self.rotation,
            fov=self.fov,
            near=self.near,
            far=self.far,
        )
