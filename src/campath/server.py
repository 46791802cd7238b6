from __future__ import annotations

from fastapi import FastAPI

from .api import create_api_app
from .core.session import CameraPathSession
from .io.storage import LocalStorage
from .settings import CameraPathSettings


def create_app(session: CameraPathSession | None = None, settings: CameraPathSettings | None = None) -> FastAPI:
    """Create the API app around `session`, or around a fresh session configured from the environment."""

    if session is None:
        settings = settings if settings is not None else CameraPathSettings.from_env()
        session = CameraPathSession(storage=LocalStorage(), settings=settings)
    return create_api_app(session)


# Convenience for uvicorn: `uvicorn campath.server:app`
app = create_app()
