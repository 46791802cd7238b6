from __future__ import annotations

from typing import Any


class CameraPathClient:
    """HTTP client for driving a running campath server."""

    def __init__(self, base_url: str = "http://127.0.0.1:8000") -> None:
        self.base_url = base_url.rstrip("/")

    def _request(
        self,
        method: str,
        path: str,
        *,
        what: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        timeout_s: float = 10.0,
    ) -> Any:
        import httpx

        with httpx.Client(base_url=self.base_url, timeout=timeout_s) as client:
            res = client.request(method, path, json=json, params=params)
            if res.status_code >= 400:
                raise RuntimeError(f"Failed to {what}: {res.status_code} {res.text}")
            return res.json()

    def get_trajectory(self, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return dict(self._request("GET", "/api/trajectory", what="get trajectory", timeout_s=timeout_s))

    def set_parameters(
        self,
        *,
        total_duration: float | None = None,
        fps: int | None = None,
        scale: float | None = None,
        timeout_s: float = 10.0,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if total_duration is not None:
            body["totalDuration"] = float(total_duration)
        if fps is not None:
            body["fps"] = int(fps)
        if scale is not None:
            body["scale"] = float(scale)
        return dict(self._request("PATCH", "/api/trajectory", what="update trajectory", json=body, timeout_s=timeout_s))

    def add_keyframe(self, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return dict(self._request("POST", "/api/keyframes", what="add keyframe", timeout_s=timeout_s))

    def remove_keyframe(self, index: int, *, timeout_s: float = 10.0) -> bool:
        data = self._request("DELETE", f"/api/keyframes/{int(index)}", what="remove keyframe", timeout_s=timeout_s)
        return bool(data.get("removed"))

    def clear_keyframes(self, *, timeout_s: float = 10.0) -> None:
        self._request("DELETE", "/api/keyframes", what="clear keyframes", timeout_s=timeout_s)

    def sort_keyframes(self, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return dict(self._request("POST", "/api/keyframes/sort", what="sort keyframes", timeout_s=timeout_s))

    def generate_spherical(
        self,
        center: tuple[float, float, float] | list[float],
        radius: float,
        count: int,
        *,
        timeout_s: float = 10.0,
    ) -> dict[str, Any]:
        body = {"center": [float(c) for c in center], "radius": float(radius), "count": int(count)}
        return dict(
            self._request("POST", "/api/keyframes/spherical", what="generate keyframes", json=body, timeout_s=timeout_s)
        )

    def move_to_keyframe(self, index: int, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return dict(
            self._request("POST", f"/api/keyframes/{int(index)}/goto", what="move to keyframe", timeout_s=timeout_s)
        )

    def sample(self, t: float, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return dict(self._request("GET", "/api/sample", what="sample pose", params={"t": float(t)}, timeout_s=timeout_s))

    def get_camera(self, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return dict(self._request("GET", "/api/camera", what="get camera", timeout_s=timeout_s))

    def set_camera(
        self,
        *,
        position: tuple[float, float, float] | list[float] | None = None,
        rotation: tuple[float, float, float, float] | list[float] | None = None,
        fov: float | None = None,
        near: float | None = None,
        far: float | None = None,
        timeout_s: float = 10.0,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if position is not None:
            body["position"] = [float(v) for v in position]
        if rotation is not None:
            body["rotation"] = [float(v) for v in rotation]
        if fov is not None:
            body["fov"] = float(fov)
        if near is not None:
            body["near"] = float(near)
        if far is not None:
            body["far"] = float(far)
        return dict(self._request("PUT", "/api/camera", what="set camera", json=body, timeout_s=timeout_s))

    def play(self, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return dict(self._request("POST", "/api/playback/play", what="start playback", timeout_s=timeout_s))

    def stop(self, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return dict(self._request("POST", "/api/playback/stop", what="stop playback", timeout_s=timeout_s))

    def tick(self, elapsed: float | None = None, *, timeout_s: float = 10.0) -> dict[str, Any]:
        body: dict[str, Any] = {} if elapsed is None else {"elapsed": float(elapsed)}
        return dict(self._request("POST", "/api/playback/tick", what="tick playback", json=body, timeout_s=timeout_s))

    def seek(self, t: float, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return dict(
            self._request("POST", "/api/playback/seek", what="seek playback", json={"time": float(t)}, timeout_s=timeout_s)
        )

    def import_json(self, path: str, *, look_at_up: bool = False, timeout_s: float = 10.0) -> dict[str, Any]:
        body = {"path": str(path), "lookAtUp": bool(look_at_up)}
        return dict(self._request("POST", "/api/io/import", what="import JSON", json=body, timeout_s=timeout_s))

    def export_json(self, path: str, *, look_at_up: bool = False, timeout_s: float = 10.0) -> str:
        body = {"path": str(path), "lookAtUp": bool(look_at_up)}
        return str(self._request("POST", "/api/io/export", what="export JSON", json=body, timeout_s=timeout_s)["path"])

    def export_full_path(self, path: str, *, look_at_up: bool = False, timeout_s: float = 30.0) -> str:
        body = {"path": str(path), "lookAtUp": bool(look_at_up)}
        data = self._request("POST", "/api/io/export-full", what="export full camera path", json=body, timeout_s=timeout_s)
        return str(data["path"])

    def load_paths(
        self,
        directory: str | None = None,
        *,
        look_at_up: bool = False,
        timeout_s: float = 30.0,
    ) -> list[dict[str, Any]]:
        body: dict[str, Any] = {"lookAtUp": bool(look_at_up)}
        if directory is not None:
            body["directory"] = str(directory)
        return list(self._request("POST", "/api/paths", what="load paths", json=body, timeout_s=timeout_s))

    def list_paths(self, *, timeout_s: float = 10.0) -> list[dict[str, Any]]:
        return list(self._request("GET", "/api/paths", what="list paths", timeout_s=timeout_s))

    def clear_paths(self, *, timeout_s: float = 10.0) -> None:
        self._request("DELETE", "/api/paths", what="clear paths", timeout_s=timeout_s)
