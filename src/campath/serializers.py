from __future__ import annotations

from typing import Any

from .core.codec import LoadedPath
from .core.geometry import forward_vector, up_vector
from .core.keyframe import Keyframe, Pose
from .core.trajectory import Trajectory


def _vec(v: tuple[float, ...]) -> list[float]:
    return [float(x) for x in v]


def pose_to_dict(pose: Pose) -> dict[str, Any]:
    return {
        "position": _vec(pose.position),
        "rotation": _vec(pose.rotation),
        "lookAt": _vec(forward_vector(pose.rotation)),
        "up": _vec(up_vector(pose.rotation)),
        "fov": float(pose.fov),
        "near": float(pose.near),
        "far": float(pose.far),
    }


def keyframe_to_dict(index: int, kf: Keyframe) -> dict[str, Any]:
    out = pose_to_dict(kf.pose())
    out["index"] = int(index)
    out["time"] = float(kf.time)
    return out


def trajectory_to_dict(trajectory: Trajectory) -> dict[str, Any]:
    sphere = None
    if trajectory.sphere is not None:
        sphere = {"center": _vec(trajectory.sphere.center), "radius": float(trajectory.sphere.radius)}
    return {
        "totalDuration": float(trajectory.total_duration),
        "fps": int(trajectory.fps),
        "scale": float(trajectory.scale),
        "sphere": sphere,
        "keyframes": [keyframe_to_dict(i, k) for i, k in enumerate(trajectory.keyframes)],
    }


def loaded_path_to_dict(index: int, count: int, path: LoadedPath) -> dict[str, Any]:
    # Hue spreads the paths evenly around the color wheel by load order.
    return {
        "index": int(index),
        "source": path.source,
        "hue": float(index) / float(max(count, 1)),
        "keyframeCount": len(path.trajectory.keyframes),
        "totalDuration": float(path.trajectory.total_duration),
        "positions": path.trajectory.positions().tolist(),
    }
