from __future__ import annotations

import math

from .errors import InsufficientKeyframes, InvalidParameter
from .geometry import lerp, lerp_vec3, slerp
from .keyframe import Keyframe, Pose
from .trajectory import Trajectory


def find_bracket(keyframes: list[Keyframe], t: float) -> tuple[Keyframe, Keyframe]:
    """Return the keyframe pair whose interval contains `t`.

    The scan runs in stored order and stops at the first matching pair, so the
    answer is only meaningful for a time-sorted list. Times outside the
    first/last keyframe collapse onto that keyframe.
    """

    if len(keyframes) < 2:
        raise InsufficientKeyframes(len(keyframes))

    kf0, kf1 = keyframes[0], keyframes[1]
    for i in range(len(keyframes) - 1):
        if keyframes[i].time <= t <= keyframes[i + 1].time:
            kf0, kf1 = keyframes[i], keyframes[i + 1]
            break

    if t < keyframes[0].time:
        kf0 = kf1 = keyframes[0]
    elif t > keyframes[-1].time:
        kf0 = kf1 = keyframes[-1]
    return kf0, kf1


def interpolate(kf0: Keyframe, kf1: Keyframe, t: float) -> Pose:
    segment = kf1.time - kf0.time
    local_t = (t - kf0.time) / segment if segment > 0 else 1.0
    return Pose(
        position=lerp_vec3(kf0.position, kf1.position, local_t),
        rotation=slerp(kf0.rotation, kf1.rotation, local_t),
        fov=lerp(kf0.fov, kf1.fov, local_t),
        near=lerp(kf0.near, kf1.near, local_t),
        far=lerp(kf0.far, kf1.far, local_t),
    )


def sample(trajectory: Trajectory, t: float) -> Pose:
    """Camera pose at time `t`. Does not modify `trajectory`."""
    t = float(t)
    if not math.isfinite(t):
        raise InvalidParameter("t must be a finite number")
    kf0, kf1 = find_bracket(trajectory.keyframes, t)
    if kf0 is kf1:
        return kf0.pose()
    return interpolate(kf0, kf1, t)


def frame_count(trajectory: Trajectory) -> int:
    """Number of intervals used when baking the path at the trajectory fps."""
    return int(math.floor(trajectory.total_duration * trajectory.fps))


def sample_frames(trajectory: Trajectory) -> list[tuple[float, Pose]]:
    """Resample the trajectory at fixed intervals over [0, total_duration].

    Yields floor(total_duration * fps) + 1 evenly spaced samples; a duration
    too short for a single interval produces one sample at t=0.
    """

    if len(trajectory.keyframes) < 2:
        raise InsufficientKeyframes(len(trajectory.keyframes))

    n = frame_count(trajectory)
    if n <= 0:
        return [(0.0, sample(trajectory, 0.0))]

    dt = trajectory.total_duration / float(n)
    out: list[tuple[float, Pose]] = []
    for i in range(n + 1):
        t = float(i) * dt
        out.append((t, sample(trajectory, t)))
    return out
