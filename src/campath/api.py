from __future__ import annotations

import logging
from typing import Any

import numpy as np
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .core.errors import (
    CameraPathError,
    DirectoryNotFound,
    FileNotFound,
    IndexOutOfRange,
)
from .core.keyframe import Pose
from .core.session import CameraPathSession
from .serializers import keyframe_to_dict, loaded_path_to_dict, pose_to_dict, trajectory_to_dict


logger = logging.getLogger(__name__)


def parse_bool(value: Any, *, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        raise ValueError(f"Missing {field}")
    s = str(value).strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid {field}")


def parse_float(value: Any, *, field: str) -> float:
    if value is None or isinstance(value, bool):
        raise ValueError(f"Invalid {field}")
    try:
        out = float(value)
    except (TypeError, ValueError) as ex:
        raise ValueError(f"Invalid {field}") from ex
    if not np.isfinite(out):
        raise ValueError(f"Invalid {field}")
    return out


def parse_vec3(value: Any, *, field: str) -> tuple[float, float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"{field} must be an array of 3 numbers")
    x, y, z = (parse_float(v, field=field) for v in value)
    return x, y, z


def _http_error(ex: Exception) -> HTTPException:
    if isinstance(ex, (IndexOutOfRange, FileNotFound, DirectoryNotFound)):
        return HTTPException(status_code=404, detail=str(ex))
    return HTTPException(status_code=400, detail=str(ex))


def _look_at_up(body: dict) -> bool:
    return parse_bool(body.get("lookAtUp", False), field="lookAtUp")


def _require_path(body: dict, key: str = "path") -> str:
    path = str(body.get(key) or "").strip()
    if not path:
        raise ValueError(f"Missing {key}")
    return path


def create_api_app(session: CameraPathSession | None = None) -> FastAPI:
    session = session if session is not None else CameraPathSession()
    app = FastAPI(title="campath", version="0.1.0")
    app.state.session = session

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/events")
    def events() -> dict[str, int]:
        # Minimal polling endpoint.
        return {"revision": session.revision}

    @app.get("/api/trajectory")
    def get_trajectory() -> dict:
        return trajectory_to_dict(session.trajectory_copy())

    @app.patch("/api/trajectory")
    def update_trajectory(body: dict) -> dict:
        try:
            total_duration = body.get("totalDuration")
            fps = body.get("fps")
            scale = body.get("scale")
            if fps is not None and (isinstance(fps, bool) or not isinstance(fps, int)):
                raise ValueError("fps must be a positive integer")
            traj = session.update_parameters(
                total_duration=None if total_duration is None else parse_float(total_duration, field="totalDuration"),
                fps=fps,
                scale=None if scale is None else parse_float(scale, field="scale"),
            )
            return trajectory_to_dict(traj.copy())
        except (CameraPathError, ValueError) as ex:
            raise _http_error(ex)

    @app.post("/api/keyframes")
    def add_keyframe() -> dict:
        index, kf = session.add_keyframe()
        return keyframe_to_dict(index, kf)

    @app.delete("/api/keyframes")
    def clear_keyframes() -> dict:
        session.clear_keyframes()
        return {"ok": True}

    @app.delete("/api/keyframes/{index}")
    def remove_keyframe(index: int) -> dict:
        removed = session.remove_keyframe(index)
        return {"removed": bool(removed), "count": len(session.trajectory.keyframes)}

    @app.post("/api/keyframes/sort")
    def sort_keyframes() -> dict:
        session.sort_keyframes()
        return trajectory_to_dict(session.trajectory_copy())

    @app.post("/api/keyframes/spherical")
    def generate_spherical(body: dict) -> dict:
        try:
            center = parse_vec3(body.get("center", [0.0, 0.0, 0.0]), field="center")
            radius = parse_float(body.get("radius"), field="radius")
            count_raw = body.get("count")
            if isinstance(count_raw, bool) or not isinstance(count_raw, int):
                raise ValueError("count must be an integer")
            session.generate_spherical(center, radius, count_raw)
        except (CameraPathError, ValueError) as ex:
            raise _http_error(ex)
        return trajectory_to_dict(session.trajectory_copy())

    @app.post("/api/keyframes/{index}/goto")
    def goto_keyframe(index: int) -> dict:
        try:
            pose = session.move_to_keyframe(index)
        except CameraPathError as ex:
            raise _http_error(ex)
        return pose_to_dict(pose)

    @app.get("/api/sample")
    def sample_pose(t: float) -> dict:
        try:
            pose = session.sample(t)
        except CameraPathError as ex:
            raise _http_error(ex)
        out = pose_to_dict(pose)
        out["time"] = float(t)
        return out

    @app.get("/api/camera")
    def get_camera() -> dict:
        return pose_to_dict(session.current_pose())

    @app.put("/api/camera")
    def set_camera(body: dict) -> dict:
        try:
            current = session.current_pose()
            position = parse_vec3(body.get("position", list(current.position)), field="position")
            rotation_raw = body.get("rotation")
            if rotation_raw is None:
                rotation = current.rotation
            else:
                if not isinstance(rotation_raw, (list, tuple)) or len(rotation_raw) != 4:
                    raise ValueError("rotation must be an array of 4 numbers")
                rotation = tuple(parse_float(v, field="rotation") for v in rotation_raw)
            pose = Pose.create(
                position,
                rotation,
                fov=parse_float(body.get("fov", current.fov), field="fov"),
                near=parse_float(body.get("near", current.near), field="near"),
                far=parse_float(body.get("far", current.far), field="far"),
            )
        except (CameraPathError, ValueError) as ex:
            raise _http_error(ex)
        session.set_camera_pose(pose)
        return pose_to_dict(pose)

    def _playback_dict() -> dict:
        state, timer = session.playback_state()
        return {"state": state.value, "time": timer, "debug": session.debug_info()}

    @app.get("/api/playback")
    def get_playback() -> dict:
        return _playback_dict()

    @app.post("/api/playback/play")
    def play() -> dict:
        try:
            session.play()
        except CameraPathError as ex:
            raise _http_error(ex)
        return _playback_dict()

    @app.post("/api/playback/stop")
    def stop() -> dict:
        session.stop()
        return _playback_dict()

    @app.post("/api/playback/tick")
    def tick(body: dict) -> dict:
        try:
            elapsed = body.get("elapsed")
            elapsed_v = None if elapsed is None else parse_float(elapsed, field="elapsed")
            if elapsed_v is not None and elapsed_v < 0.0:
                raise ValueError("elapsed must be >= 0")
        except ValueError as ex:
            raise _http_error(ex)
        pose = session.tick(elapsed_v)
        out = _playback_dict()
        out["pose"] = None if pose is None else pose_to_dict(pose)
        return out

    @app.post("/api/playback/seek")
    def seek(body: dict) -> dict:
        try:
            pose = session.seek(parse_float(body.get("time"), field="time"))
        except (CameraPathError, ValueError) as ex:
            raise _http_error(ex)
        out = _playback_dict()
        out["pose"] = pose_to_dict(pose)
        return out

    @app.post("/api/io/import")
    def import_json(body: dict) -> dict:
        try:
            session.import_json(_require_path(body), look_at_up=_look_at_up(body))
        except (CameraPathError, ValueError) as ex:
            raise _http_error(ex)
        return trajectory_to_dict(session.trajectory_copy())

    @app.post("/api/io/export")
    def export_json(body: dict) -> dict:
        try:
            path = session.export_json(_require_path(body), look_at_up=_look_at_up(body))
        except (CameraPathError, ValueError) as ex:
            raise _http_error(ex)
        return {"ok": True, "path": path}

    @app.post("/api/io/export-full")
    def export_full(body: dict) -> dict:
        try:
            path = session.export_full_path(_require_path(body), look_at_up=_look_at_up(body))
        except (CameraPathError, ValueError) as ex:
            raise _http_error(ex)
        return {"ok": True, "path": path}

    @app.get("/api/paths")
    def list_paths() -> list[dict]:
        paths = session.paths()
        return [loaded_path_to_dict(i, len(paths), p) for i, p in enumerate(paths)]

    @app.post("/api/paths")
    def load_paths(body: dict) -> list[dict]:
        try:
            directory = body.get("directory")
            paths = session.load_paths(
                None if directory is None else str(directory),
                look_at_up=_look_at_up(body),
            )
        except (CameraPathError, ValueError) as ex:
            raise _http_error(ex)
        return [loaded_path_to_dict(i, len(paths), p) for i, p in enumerate(paths)]

    @app.delete("/api/paths")
    def clear_paths() -> dict:
        session.clear_paths()
        return {"ok": True}

    return app
