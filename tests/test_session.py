from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from campath.core.camera import FixedStepClock, VirtualCamera
from campath.core.codec import save_trajectory
from campath.core.errors import FileNotFound, InvalidParameter, ParseError
from campath.core.keyframe import Keyframe, Pose
from campath.core.playback import PlaybackState
from campath.core.session import CameraPathSession
from campath.core.trajectory import Trajectory
from campath.io.frames import CallbackFrameSink
from campath.io.storage import LocalStorage
from campath.settings import CameraPathSettings


def _session(tmp_path: Path, **settings) -> tuple[CameraPathSession, VirtualCamera]:
    camera = VirtualCamera(Pose.create((1.0, 2.0, 3.0), fov=50.0, near=0.2, far=200.0))
    session = CameraPathSession(
        camera,
        storage=LocalStorage(tmp_path),
        clock=FixedStepClock(0.5),
        settings=CameraPathSettings(**settings),
        rng=np.random.default_rng(3),
    )
    return session, camera


def _trajectory(n: int = 3) -> Trajectory:
    kfs = [
        Keyframe(time=float(i), position=(float(i), 0.0, 0.0), rotation=(0.0, 0.0, 0.0, 1.0), fov=60.0, near=0.3, far=100.0)
        for i in range(n)
    ]
    return Trajectory(keyframes=kfs, total_duration=float(n - 1))


def test_add_keyframe_uses_current_camera(tmp_path: Path) -> None:
    session, camera = _session(tmp_path)
    index, kf = session.add_keyframe()
    assert index == 0
    assert kf.time == 0.0
    assert kf.position == (1.0, 2.0, 3.0)
    assert (kf.fov, kf.near, kf.far) == (50.0, 0.2, 200.0)

    camera.set_pose(Pose.create((4.0, 0.0, 0.0)))
    index, second = session.add_keyframe()
    assert index == 1
    assert second.time == 1.0
    assert second.position == (4.0, 0.0, 0.0)
    assert len(session.keyframes()) == 2


def test_keyframes_returns_copies(tmp_path: Path) -> None:
    session, _ = _session(tmp_path)
    session.add_keyframe()
    listed = session.keyframes()
    listed[0].time = 42.0
    assert session.trajectory.keyframes[0].time == 0.0


def test_revision_tracks_edits(tmp_path: Path) -> None:
    session, _ = _session(tmp_path)
    r0 = session.revision
    session.add_keyframe()
    assert session.revision == r0 + 1
    session.remove_keyframe(10)
    assert session.revision == r0 + 1
    session.remove_keyframe(0)
    assert session.revision == r0 + 2


def test_update_parameters_is_all_or_nothing(tmp_path: Path) -> None:
    session, _ = _session(tmp_path)
    session.update_parameters(total_duration=8.0, fps=24)
    with pytest.raises(InvalidParameter):
        session.update_parameters(total_duration=3.0, scale=-1.0)
    traj = session.trajectory
    assert (traj.total_duration, traj.fps, traj.scale) == (8.0, 24, 1.0)


def test_generate_spherical_copies_camera_lens(tmp_path: Path) -> None:
    session, _ = _session(tmp_path)
    out = session.generate_spherical((0.0, 0.0, 0.0), 2.0, 4)
    assert len(out) == 4
    assert all(k.fov == 50.0 for k in out)
    assert session.trajectory.sphere is not None


def test_playback_through_session(tmp_path: Path) -> None:
    session, camera = _session(tmp_path)
    session.import_json(save_trajectory(session.storage, "p.json", _trajectory()))
    session.play()
    assert session.playback_state() == (PlaybackState.PLAYING, 0.0)
    session.tick()
    assert session.playback_state() == (PlaybackState.PLAYING, 0.5)
    assert camera.get_current_pose().position == pytest.approx((0.5, 0.0, 0.0))
    session.stop()
    assert session.playback_state()[0] is PlaybackState.IDLE
    assert "Keyframes: 3" in session.debug_info()


def test_import_replaces_trajectory(tmp_path: Path) -> None:
    session, _ = _session(tmp_path)
    path = save_trajectory(session.storage, "path.json", _trajectory(4))
    session.add_keyframe()
    loaded = session.import_json(path)
    assert len(loaded.keyframes) == 4
    assert session.trajectory is loaded
    assert session.driver.trajectory is loaded


def test_failed_import_leaves_state_untouched(tmp_path: Path) -> None:
    session, _ = _session(tmp_path)
    session.add_keyframe()
    session.add_keyframe()
    before = session.trajectory_copy()
    revision = session.revision

    (tmp_path / "bad.json").write_text(json.dumps({"camera": {"fovy": 60}}), encoding="utf-8")
    with pytest.raises(ParseError):
        session.import_json("bad.json")
    with pytest.raises(FileNotFound):
        session.import_json("missing.json")

    assert session.trajectory.keyframes == before.keyframes
    assert session.revision == revision


def test_export_uses_camera_lens_and_settings_aspect(tmp_path: Path) -> None:
    session, _ = _session(tmp_path, aspect="16/9")
    session.import_json(save_trajectory(session.storage, "in.json", _trajectory()))
    written = session.export_json("out")
    assert written == "out.json"
    cam = json.loads((tmp_path / "out.json").read_text(encoding="utf-8"))["camera"]
    assert (cam["fovy"], cam["near"], cam["far"]) == (50.0, 0.2, 200.0)
    assert cam["aspect"] == "16/9"

    session.export_full_path("full.json")
    full = json.loads((tmp_path / "full.json").read_text(encoding="utf-8"))["camera"]
    assert len(full["trajectory"]) == 2 * 30 + 1


def test_load_and_clear_paths(tmp_path: Path) -> None:
    session, _ = _session(tmp_path, json_dir="library")
    save_trajectory(session.storage, "library/one.json", _trajectory(2))
    save_trajectory(session.storage, "library/two.json", _trajectory(5))

    loaded = session.load_paths()
    assert [Path(p.source).name for p in loaded] == ["one.json", "two.json"]
    assert [len(p.trajectory.keyframes) for p in session.paths()] == [2, 5]

    session.clear_paths()
    assert session.paths() == []


def test_export_frames_defaults_to_settings(tmp_path: Path) -> None:
    session, _ = _session(tmp_path, export_dir=str(tmp_path / "shots"), frame_prefix="img_")
    session.import_json(save_trajectory(session.storage, "in.json", _trajectory(2)))
    written = session.export_frames(CallbackFrameSink(lambda p: None))
    assert [Path(p).name for p in written] == ["img_000.png", "img_001.png"]
    assert (tmp_path / "shots").is_dir()


def test_export_frames_relative_dir_resolves_against_storage_root(tmp_path: Path, monkeypatch) -> None:
    root = tmp_path / "root"
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    monkeypatch.chdir(cwd)

    session, _ = _session(root)
    session.import_json(save_trajectory(session.storage, "in.json", _trajectory(2)))
    written = session.export_frames(CallbackFrameSink(lambda p: Path(p).write_bytes(b"png")))

    assert written == [str(root / "ExportedFrames" / f"frame_{i:03d}.png") for i in range(2)]
    assert all(Path(p).exists() for p in written)
    assert not (cwd / "ExportedFrames").exists()
