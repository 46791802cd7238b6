from __future__ import annotations

import contextlib
import logging
import socket
import threading
import time
from dataclasses import dataclass

import uvicorn

from .client import CameraPathClient
from .core.session import CameraPathSession
from .server import create_app
from .settings import CameraPathSettings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraPathServer:
    host: str
    port: int
    url: str
    session: CameraPathSession

    def client(self) -> CameraPathClient:
        return CameraPathClient(self.url.rstrip("/"))


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def _normalize_base_url(url: str) -> str:
    url = url.strip()
    if not url:
        return ""
    # Allow passing just host:port.
    if "://" not in url:
        url = "http://" + url
    return url.rstrip("/")


def _is_server_alive(base_url: str, *, timeout_s: float = 0.2) -> bool:
    """Best-effort probe to determine if a campath server is reachable."""

    import httpx

    try:
        with httpx.Client(base_url=base_url, timeout=timeout_s) as client:
            r = client.get("/healthz")
            if r.status_code != 200:
                return False
            return bool(r.json().get("ok"))
    except (httpx.HTTPError, ValueError):
        return False


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    session: CameraPathSession | None = None,
    settings: CameraPathSettings | None = None,
    log_level: str = "info",
    access_log: bool = False,
    new_server: bool = False,
    connect_timeout_s: float = 0.2,
) -> CameraPathServer | CameraPathClient:
    """Start the campath API in a background thread with a single call.

    Behavior:
    - If `settings.url` (CAMPATH_URL) points at a reachable server, attach to it
      and return a client, unless `new_server=True`.
    - Otherwise, if `port != 0` and a server already answers at that port, attach to it.
    - Otherwise start a new server and return a `CameraPathServer`.
    """

    settings = settings if settings is not None else CameraPathSettings.from_env()

    env_url = _normalize_base_url(settings.url)
    if env_url and not new_server:
        if _is_server_alive(env_url, timeout_s=connect_timeout_s):
            logger.info("Attached to campath server at %s", env_url)
            return CameraPathClient(env_url)

    if port != 0 and not new_server:
        default_url = _normalize_base_url(f"http://{host}:{port}")
        if _is_server_alive(default_url, timeout_s=connect_timeout_s):
            logger.info("Attached to campath server at %s", default_url)
            return CameraPathClient(default_url)

    if port == 0:
        port = _find_free_port(host)

    if session is None:
        session = CameraPathSession(settings=settings)
    app = create_app(session)

    config = uvicorn.Config(app, host=host, port=port, log_level=log_level, access_log=access_log)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    # Wait for startup so a subsequent client probe does not race with it.
    deadline = time.monotonic() + 5.0
    while not server.started and thread.is_alive() and time.monotonic() < deadline:
        time.sleep(0.01)

    url = f"http://{host}:{port}/"
    logger.info("campath server listening on %s", url)
    return CameraPathServer(host=host, port=port, url=url, session=session)
