from __future__ import annotations

import numpy as np
import pytest

from campath.core.errors import InvalidParameter
from campath.core.geometry import forward_vector
from campath.core.keyframe import Keyframe, Pose
from campath.core.sampler import sample
from campath.core.trajectory import Trajectory


def _pose(x: float = 0.0, fov: float = 60.0) -> Pose:
    return Pose.create((x, 1.0, 2.0), (0.0, 0.0, 0.0, 1.0), fov=fov, near=0.1, far=50.0)


def _three_keyframes() -> Trajectory:
    traj = Trajectory()
    for x in (0.0, 1.0, 2.0):
        traj.add_keyframe(_pose(x))
    return traj


def test_add_keyframe_appends_one_second_after_last() -> None:
    traj = Trajectory()
    first = traj.add_keyframe(_pose(0.0))
    assert first.time == 0.0
    traj.keyframes[0].time = 2.5
    second = traj.add_keyframe(_pose(1.0, fov=45.0))
    assert second.time == 3.5
    assert second.position == (1.0, 1.0, 2.0)
    assert second.fov == 45.0
    assert (second.near, second.far) == (0.1, 50.0)


def test_add_keyframe_does_not_sort() -> None:
    traj = Trajectory()
    traj.add_keyframe(_pose(0.0))
    traj.keyframes[0].time = 10.0
    traj.add_keyframe(_pose(1.0))
    traj.keyframes.insert(0, Keyframe(time=3.0, position=(5.0, 0.0, 0.0), rotation=(0.0, 0.0, 0.0, 1.0), fov=60.0, near=0.1, far=50.0))
    assert [k.time for k in traj.keyframes] == [3.0, 10.0, 11.0]


def test_remove_keyframe_in_range() -> None:
    traj = _three_keyframes()
    assert traj.remove_keyframe(1) is True
    assert [k.position[0] for k in traj.keyframes] == [0.0, 2.0]


def test_remove_keyframe_out_of_range_is_silent() -> None:
    traj = _three_keyframes()
    before = traj.copy()
    assert traj.remove_keyframe(99) is False
    assert traj.remove_keyframe(-1) is False
    assert traj.keyframes == before.keyframes


def test_clear_keeps_globals() -> None:
    traj = Trajectory(total_duration=7.0, fps=24, scale=3.0)
    traj.add_keyframe(_pose())
    traj.clear()
    assert traj.keyframes == []
    assert (traj.total_duration, traj.fps, traj.scale) == (7.0, 24, 3.0)


def test_sort_is_stable_and_updates_duration() -> None:
    traj = Trajectory(total_duration=1.0)
    for t, x in [(4.0, 0.0), (1.0, 1.0), (4.0, 2.0), (0.0, 3.0)]:
        kf = traj.add_keyframe(_pose(x))
        kf.time = t
    traj.sort()
    assert [k.time for k in traj.keyframes] == [0.0, 1.0, 4.0, 4.0]
    assert [k.position[0] for k in traj.keyframes] == [3.0, 1.0, 0.0, 2.0]
    assert traj.total_duration == 4.0

    sample(traj, 2.0)
    assert len(traj.keyframes) == 4
    assert traj.total_duration == traj.keyframes[-1].time


def test_sort_empty_keeps_duration() -> None:
    traj = Trajectory(total_duration=6.0)
    traj.sort()
    assert traj.total_duration == 6.0


def test_generate_spherical_positions_on_sphere() -> None:
    traj = Trajectory(total_duration=8.0)
    center = (1.0, -2.0, 0.5)
    camera = _pose(fov=35.0)
    out = traj.generate_spherical(center, 3.0, 5, camera, rng=np.random.default_rng(7))

    assert len(out) == 5
    assert len(traj.keyframes) == 5
    for kf in traj.keyframes:
        offset = np.asarray(kf.position) - np.asarray(center)
        assert np.isclose(np.linalg.norm(offset), 3.0)
        # Every view looks at the center.
        assert np.allclose(forward_vector(kf.rotation), -offset / 3.0, atol=1e-9)
        assert (kf.fov, kf.near, kf.far) == (35.0, 0.1, 50.0)

    assert [k.time for k in traj.keyframes] == [0.0, 2.0, 4.0, 6.0, 8.0]
    assert traj.total_duration == 8.0
    assert traj.sphere is not None
    assert traj.sphere.radius == 3.0


def test_generate_spherical_uses_uniform_area_mapping() -> None:
    class _FixedRng:
        def __init__(self, values: list[float]) -> None:
            self._values = list(values)

        def random(self) -> float:
            return self._values.pop(0)

    traj = Trajectory(total_duration=1.0)
    # u=0 -> theta=0, v=0.5 -> phi=pi/2: a point on the equator along +x.
    traj.generate_spherical((0.0, 0.0, 0.0), 2.0, 1, _pose(), rng=_FixedRng([0.0, 0.5]))
    assert np.allclose(traj.keyframes[0].position, (2.0, 0.0, 0.0), atol=1e-12)
    # A single keyframe sits at t=0 and collapses the duration.
    assert traj.keyframes[0].time == 0.0
    assert traj.total_duration == 0.0

    # v=1 -> phi=0: the north pole, where the view is parallel to the up reference.
    traj.generate_spherical((0.0, 0.0, 0.0), 2.0, 1, _pose(), rng=_FixedRng([0.3, 1.0]))
    assert np.allclose(traj.keyframes[0].position, (0.0, 2.0, 0.0), atol=1e-12)
    assert np.isclose(np.linalg.norm(traj.keyframes[0].rotation), 1.0)


def test_generate_spherical_rejects_bad_parameters() -> None:
    traj = _three_keyframes()
    before = traj.copy()
    with pytest.raises(InvalidParameter):
        traj.generate_spherical((0.0, 0.0, 0.0), 1.0, 0, _pose())
    with pytest.raises(InvalidParameter):
        traj.generate_spherical((0.0, 0.0, 0.0), 0.0, 4, _pose())
    with pytest.raises(InvalidParameter):
        traj.generate_spherical((0.0, 0.0, 0.0), -2.0, 4, _pose())
    assert traj.keyframes == before.keyframes
    assert traj.total_duration == before.total_duration


def test_global_parameter_validation() -> None:
    with pytest.raises(InvalidParameter):
        Trajectory(fps=0)
    with pytest.raises(InvalidParameter):
        Trajectory(fps=True)
    with pytest.raises(InvalidParameter):
        Trajectory(fps=2.5)
    with pytest.raises(InvalidParameter):
        Trajectory(scale=0.0)
    with pytest.raises(InvalidParameter):
        Trajectory(total_duration=-1.0)
