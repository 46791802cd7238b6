from __future__ import annotations

import numpy as np
import pytest

from campath.core.errors import InsufficientKeyframes, InvalidParameter
from campath.core.geometry import quat_angle
from campath.core.keyframe import Keyframe
from campath.core.sampler import find_bracket, sample, sample_frames
from campath.core.trajectory import Trajectory


IDENTITY = (0.0, 0.0, 0.0, 1.0)


def _kf(time: float, x: float, fov: float = 60.0, rotation=IDENTITY, near: float = 0.3, far: float = 1000.0) -> Keyframe:
    return Keyframe(time=time, position=(x, 0.0, 0.0), rotation=rotation, fov=fov, near=near, far=far)


def _yaw(angle: float) -> tuple[float, float, float, float]:
    return 0.0, float(np.sin(angle / 2.0)), 0.0, float(np.cos(angle / 2.0))


def test_midpoint_between_two_keyframes() -> None:
    traj = Trajectory(keyframes=[_kf(0.0, 0.0, fov=60.0), _kf(2.0, 10.0, fov=90.0)], total_duration=2.0)
    pose = sample(traj, 1.0)
    assert np.allclose(pose.position, (5.0, 0.0, 0.0))
    assert np.isclose(pose.fov, 75.0)
    assert np.allclose(pose.rotation, IDENTITY)


def test_clip_planes_are_blended_linearly() -> None:
    traj = Trajectory(
        keyframes=[_kf(0.0, 0.0, near=0.1, far=100.0), _kf(4.0, 0.0, near=0.5, far=500.0)],
        total_duration=4.0,
    )
    pose = sample(traj, 1.0)
    assert np.isclose(pose.near, 0.2)
    assert np.isclose(pose.far, 200.0)


def test_rotation_uses_slerp() -> None:
    traj = Trajectory(keyframes=[_kf(0.0, 0.0), _kf(1.0, 0.0, rotation=_yaw(np.pi / 2.0))], total_duration=1.0)
    pose = sample(traj, 0.25)
    assert np.isclose(quat_angle(IDENTITY, pose.rotation), np.pi / 8.0, atol=1e-9)
    assert np.isclose(np.linalg.norm(pose.rotation), 1.0)


def test_exact_keyframe_times_return_keyframe_pose() -> None:
    kfs = [_kf(0.0, 1.0, fov=50.0), _kf(1.5, 4.0, fov=70.0), _kf(3.0, -2.0, fov=40.0)]
    traj = Trajectory(keyframes=kfs, total_duration=3.0)
    for kf in kfs:
        pose = sample(traj, kf.time)
        assert np.allclose(pose.position, kf.position)
        assert np.isclose(pose.fov, kf.fov)


def test_values_stay_inside_bracket() -> None:
    kfs = [_kf(0.0, 1.0, fov=50.0), _kf(1.0, 4.0, fov=70.0), _kf(3.0, -2.0, fov=40.0)]
    traj = Trajectory(keyframes=kfs, total_duration=3.0)
    for t in np.linspace(0.0, 3.0, 31):
        pose = sample(traj, float(t))
        k0, k1 = find_bracket(kfs, float(t))
        lo, hi = sorted((k0.position[0], k1.position[0]))
        assert lo - 1e-9 <= pose.position[0] <= hi + 1e-9
        flo, fhi = sorted((k0.fov, k1.fov))
        assert flo - 1e-9 <= pose.fov <= fhi + 1e-9


def test_clamps_outside_range_without_extrapolating() -> None:
    first = _kf(1.0, 2.0, fov=45.0)
    last = _kf(3.0, 8.0, fov=80.0)
    traj = Trajectory(keyframes=[first, last], total_duration=3.0)

    before = sample(traj, 0.0)
    assert before == first.pose()
    after = sample(traj, 99.0)
    assert after == last.pose()


def test_zero_length_segment_takes_segment_end() -> None:
    traj = Trajectory(keyframes=[_kf(0.0, 0.0), _kf(1.0, 3.0), _kf(1.0, 7.0), _kf(2.0, 9.0)], total_duration=2.0)
    k0, k1 = find_bracket(traj.keyframes, 1.0)
    # First matching pair in stored order wins.
    assert k0.position[0] == 0.0 and k1.position[0] == 3.0
    assert np.allclose(sample(traj, 1.0).position, (3.0, 0.0, 0.0))

    dup = Trajectory(keyframes=[_kf(1.0, 3.0), _kf(1.0, 7.0)], total_duration=1.0)
    assert np.allclose(sample(dup, 1.0).position, (7.0, 0.0, 0.0))


def test_unsorted_keyframes_use_first_bracket_found() -> None:
    traj = Trajectory(keyframes=[_kf(0.0, 0.0), _kf(4.0, 4.0), _kf(2.0, 100.0)], total_duration=4.0)
    # (0, 4) brackets t=2 before (4, 2) is looked at.
    assert np.allclose(sample(traj, 2.0).position, (2.0, 0.0, 0.0))
    # Clamping looks at the stored first/last keyframe, not the smallest/largest time.
    assert np.allclose(sample(traj, 3.0).position, (100.0, 0.0, 0.0))


def test_sample_does_not_mutate() -> None:
    traj = Trajectory(keyframes=[_kf(2.0, 0.0), _kf(0.0, 1.0)], total_duration=2.0)
    before = traj.copy()
    sample(traj, 1.0)
    assert traj.keyframes == before.keyframes
    assert traj.total_duration == before.total_duration


def test_requires_two_keyframes() -> None:
    with pytest.raises(InsufficientKeyframes):
        sample(Trajectory(), 0.0)
    with pytest.raises(InsufficientKeyframes):
        sample(Trajectory(keyframes=[_kf(0.0, 0.0)]), 0.0)


def test_sample_frames_fixed_rate() -> None:
    traj = Trajectory(keyframes=[_kf(0.0, 0.0), _kf(2.0, 10.0)], total_duration=2.0, fps=5)
    frames = sample_frames(traj)
    assert len(frames) == 11
    times = [t for t, _ in frames]
    assert np.allclose(times, np.linspace(0.0, 2.0, 11))
    assert np.allclose(frames[-1][1].position, (10.0, 0.0, 0.0))
    assert np.allclose(frames[3][1].position, (3.0, 0.0, 0.0))


def test_sample_frames_floor_of_duration_times_fps() -> None:
    traj = Trajectory(keyframes=[_kf(0.0, 0.0), _kf(1.05, 1.0)], total_duration=1.05, fps=10)
    frames = sample_frames(traj)
    # floor(10.5) intervals -> 11 samples spread over the full duration.
    assert len(frames) == 11
    assert np.isclose(frames[-1][0], 1.05)


def test_sample_frames_too_short_for_one_interval() -> None:
    traj = Trajectory(keyframes=[_kf(0.0, 0.0), _kf(0.01, 1.0)], total_duration=0.01, fps=30)
    frames = sample_frames(traj)
    assert len(frames) == 1
    assert frames[0][0] == 0.0


@pytest.mark.parametrize("t", [float("nan"), float("inf"), float("-inf")])
def test_rejects_non_finite_time(t: float) -> None:
    traj = Trajectory(keyframes=[_kf(0.0, 0.0), _kf(1.0, 1.0)], total_duration=1.0)
    with pytest.raises(InvalidParameter):
        sample(traj, t)
