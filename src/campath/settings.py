from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

from .core.codec import DEFAULT_ASPECT
from .io.frames import DEFAULT_FRAME_PREFIX


_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class CameraPathSettings:
    """Process-level configuration.

    Notes:
    - Values come from `CAMPATH_*` environment variables; CLI flags override them.
    - Directories are only defaults; every operation also accepts an explicit path.
    """

    url: str = ""
    json_dir: str = "paths"
    export_dir: str = "ExportedFrames"
    frame_prefix: str = DEFAULT_FRAME_PREFIX
    aspect: str = DEFAULT_ASPECT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CameraPathSettings":
        env = os.environ if environ is None else environ
        defaults = cls()
        level = env.get("CAMPATH_LOG_LEVEL", defaults.log_level).strip().upper()
        if level not in _LOG_LEVELS:
            level = defaults.log_level
        return cls(
            url=env.get("CAMPATH_URL", defaults.url).strip(),
            json_dir=env.get("CAMPATH_JSON_DIR", defaults.json_dir),
            export_dir=env.get("CAMPATH_EXPORT_DIR", defaults.export_dir),
            frame_prefix=env.get("CAMPATH_FRAME_PREFIX", defaults.frame_prefix),
            aspect=env.get("CAMPATH_ASPECT", defaults.aspect).strip() or defaults.aspect,
            log_level=level,
        )

    def override(self, **values: Any) -> "CameraPathSettings":
        """Return a copy with every non-None value applied."""
        return replace(self, **{k: v for k, v in values.items() if v is not None})


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
