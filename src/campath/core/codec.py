from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from .errors import CameraPathError, InsufficientKeyframes, ParseError
from .geometry import Vec3, QuatXYZW, as_vec3, forward_vector, look_rotation, normalized_quat, up_vector
from .keyframe import DEFAULT_FAR, DEFAULT_FOV, DEFAULT_NEAR, Keyframe, Pose, validate_lens
from .sampler import sample_frames
from .trajectory import DEFAULT_FPS, DEFAULT_SCALE, Trajectory
from ..io.storage import Storage, ensure_json_suffix


logger = logging.getLogger(__name__)

DEFAULT_ASPECT = "1024/768"


def _vec_to_list(v: tuple[float, ...] | np.ndarray) -> list[float]:
    return [float(x) for x in v]


def _encode_entry(time: float, position: Vec3, rotation: QuatXYZW, *, scale: float, look_at_up: bool) -> dict[str, Any]:
    pos = np.asarray(position, dtype=np.float64) / float(scale)
    entry: dict[str, Any] = {"time": float(time), "position": _vec_to_list(pos)}
    if look_at_up:
        entry["lookAt"] = _vec_to_list(forward_vector(rotation))
        entry["up"] = _vec_to_list(up_vector(rotation))
    else:
        entry["rotation"] = _vec_to_list(normalized_quat(rotation))
    return entry


def _lens_for_export(trajectory: Trajectory, camera: Pose | None) -> tuple[float, float, float]:
    # The persisted format carries one lens for the whole path.
    if camera is not None:
        return float(camera.fov), float(camera.near), float(camera.far)
    if trajectory.keyframes:
        kf = trajectory.keyframes[0]
        return float(kf.fov), float(kf.near), float(kf.far)
    return DEFAULT_FOV, DEFAULT_NEAR, DEFAULT_FAR


def _envelope(
    trajectory: Trajectory,
    entries: list[dict[str, Any]],
    *,
    camera: Pose | None,
    aspect: str,
) -> dict[str, Any]:
    fov, near, far = _lens_for_export(trajectory, camera)
    return {
        "camera": {
            "fovy": fov,
            "aspect": str(aspect),
            "near": near,
            "far": far,
            "totalDuration": float(trajectory.total_duration),
            "fps": int(trajectory.fps),
            "scale": float(trajectory.scale),
            "trajectory": entries,
        }
    }


def encode_trajectory(
    trajectory: Trajectory,
    *,
    look_at_up: bool = False,
    camera: Pose | None = None,
    aspect: str = DEFAULT_ASPECT,
) -> dict[str, Any]:
    """Serialize the keyframes of `trajectory` into the persisted JSON layout.

    Positions are divided by the trajectory scale. `look_at_up` selects the
    lookAt/up keyframe encoding instead of the rotation quaternion.
    """

    entries = [
        _encode_entry(k.time, k.position, k.rotation, scale=trajectory.scale, look_at_up=look_at_up)
        for k in trajectory.keyframes
    ]
    return _envelope(trajectory, entries, camera=camera, aspect=aspect)


def encode_full_path(
    trajectory: Trajectory,
    *,
    look_at_up: bool = False,
    camera: Pose | None = None,
    aspect: str = DEFAULT_ASPECT,
) -> dict[str, Any]:
    """Serialize the trajectory resampled at its fps instead of its keyframes."""

    if len(trajectory.keyframes) < 2:
        raise InsufficientKeyframes(len(trajectory.keyframes))
    entries = [
        _encode_entry(t, pose.position, pose.rotation, scale=trajectory.scale, look_at_up=look_at_up)
        for t, pose in sample_frames(trajectory)
    ]
    return _envelope(trajectory, entries, camera=camera, aspect=aspect)


def _parse_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise ParseError(f"Invalid {field}")
    try:
        out = float(value)
    except (TypeError, ValueError) as ex:
        raise ParseError(f"Invalid {field}") from ex
    if not np.isfinite(out):
        raise ParseError(f"Invalid {field}")
    return out


def _parse_vector(value: Any, size: int, field: str) -> tuple[float, ...]:
    if not isinstance(value, (list, tuple)) or len(value) != size:
        raise ParseError(f"{field} must be an array of {size} numbers")
    return tuple(_parse_float(v, field) for v in value)


def _decode_rotation(entry: dict[str, Any], index: int, *, look_at_up: bool) -> QuatXYZW:
    try:
        if look_at_up:
            if "lookAt" not in entry or "up" not in entry:
                raise ParseError(f"trajectory[{index}] is missing lookAt/up")
            look_at = _parse_vector(entry["lookAt"], 3, f"trajectory[{index}].lookAt")
            up = _parse_vector(entry["up"], 3, f"trajectory[{index}].up")
            return look_rotation(look_at, up)

        if "rotation" not in entry:
            raise ParseError(f"trajectory[{index}] is missing rotation")
        rot = _parse_vector(entry["rotation"], 4, f"trajectory[{index}].rotation")
        return normalized_quat(rot)
    except ParseError:
        raise
    except ValueError as ex:
        raise ParseError(f"trajectory[{index}]: {ex}") from ex


def decode_trajectory(data: Any, *, look_at_up: bool = False) -> Trajectory:
    """Inverse of `encode_trajectory`.

    Positions are multiplied by the persisted scale and every keyframe receives
    the trajectory-level fovy/near/far.
    """

    if not isinstance(data, dict) or not isinstance(data.get("camera"), dict):
        raise ParseError("Expected a JSON object with a 'camera' object")
    cam = data["camera"]

    for key in ("fovy", "near", "far"):
        if key not in cam:
            raise ParseError(f"camera.{key} is missing")
    try:
        fov, near, far = validate_lens(
            _parse_float(cam["fovy"], "camera.fovy"),
            _parse_float(cam["near"], "camera.near"),
            _parse_float(cam["far"], "camera.far"),
        )
    except ParseError:
        raise
    except ValueError as ex:
        raise ParseError(str(ex)) from ex

    scale = _parse_float(cam.get("scale", DEFAULT_SCALE), "camera.scale")
    if scale <= 0.0:
        raise ParseError("camera.scale must be > 0")

    raw_entries = cam.get("trajectory", [])
    if raw_entries is None:
        raw_entries = []
    if not isinstance(raw_entries, list):
        raise ParseError("camera.trajectory must be an array")

    keyframes: list[Keyframe] = []
    for i, entry in enumerate(raw_entries):
        if not isinstance(entry, dict):
            raise ParseError(f"trajectory[{i}] must be an object")
        if "time" not in entry or "position" not in entry:
            raise ParseError(f"trajectory[{i}] is missing time/position")
        t = _parse_float(entry["time"], f"trajectory[{i}].time")
        if t < 0.0:
            raise ParseError(f"trajectory[{i}].time must be >= 0")
        pos = np.asarray(_parse_vector(entry["position"], 3, f"trajectory[{i}].position"), dtype=np.float64)
        keyframes.append(
            Keyframe(
                time=t,
                position=as_vec3(pos * scale),
                rotation=_decode_rotation(entry, i, look_at_up=look_at_up),
                fov=fov,
                near=near,
                far=far,
            )
        )

    default_duration = keyframes[-1].time if keyframes else 0.0
    total_duration = _parse_float(cam.get("totalDuration", default_duration), "camera.totalDuration")
    fps_raw = cam.get("fps", DEFAULT_FPS)
    if isinstance(fps_raw, bool) or not isinstance(fps_raw, (int, float)):
        raise ParseError("camera.fps must be a positive integer")

    try:
        return Trajectory(keyframes=keyframes, total_duration=total_duration, fps=fps_raw, scale=scale)
    except CameraPathError as ex:
        raise ParseError(str(ex)) from ex


def dumps(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2)


def loads_trajectory(text: str, *, look_at_up: bool = False) -> Trajectory:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as ex:
        raise ParseError(f"Malformed JSON: {ex}") from ex
    return decode_trajectory(data, look_at_up=look_at_up)


def load_trajectory(storage: Storage, path: str | Path, *, look_at_up: bool = False) -> Trajectory:
    text = storage.read_text(path)
    trajectory = loads_trajectory(text, look_at_up=look_at_up)
    logger.info("Loaded camera path from: %s (%d keyframes)", path, len(trajectory.keyframes))
    return trajectory


def save_trajectory(
    storage: Storage,
    path: str | Path,
    trajectory: Trajectory,
    *,
    look_at_up: bool = False,
    camera: Pose | None = None,
    aspect: str = DEFAULT_ASPECT,
) -> str:
    out_path = ensure_json_suffix(path)
    data = encode_trajectory(trajectory, look_at_up=look_at_up, camera=camera, aspect=aspect)
    storage.write_text(out_path, dumps(data))
    logger.info("Saved JSON to: %s", out_path)
    return out_path


def save_full_path(
    storage: Storage,
    path: str | Path,
    trajectory: Trajectory,
    *,
    look_at_up: bool = False,
    camera: Pose | None = None,
    aspect: str = DEFAULT_ASPECT,
) -> str:
    out_path = ensure_json_suffix(path)
    data = encode_full_path(trajectory, look_at_up=look_at_up, camera=camera, aspect=aspect)
    storage.write_text(out_path, dumps(data))
    logger.info(
        "Saved full camera path with %d frames to: %s",
        len(data["camera"]["trajectory"]),
        out_path,
    )
    return out_path


@dataclass(frozen=True)
class LoadedPath:
    """A read-only trajectory loaded for visualization. Identified by load order."""

    source: str
    trajectory: Trajectory


def load_trajectory_set(storage: Storage, directory: str | Path, *, look_at_up: bool = False) -> list[LoadedPath]:
    """Load every `*.json` file in `directory`.

    Files that cannot be read or parsed are logged and skipped, as are files
    holding no keyframes. A missing directory raises `DirectoryNotFound`.
    """

    loaded: list[LoadedPath] = []
    for file_path in storage.list_files(directory, "*.json"):
        name = Path(file_path).name
        try:
            trajectory = loads_trajectory(storage.read_text(file_path), look_at_up=look_at_up)
        except (CameraPathError, OSError, UnicodeDecodeError) as ex:
            logger.warning("Skipping %s: %s", name, ex)
            continue
        if not trajectory.keyframes:
            logger.info("Skipping %s: no keyframes", name)
            continue
        loaded.append(LoadedPath(source=str(file_path), trajectory=trajectory))
        logger.info("Loaded camera path from %s with %d keyframes.", name, len(trajectory.keyframes))

    if not loaded:
        logger.warning("No valid JSON files found in the folder %s.", directory)
    return loaded
