from __future__ import annotations

import argparse
import logging
import sys
import time

from .core.codec import load_trajectory, save_full_path
from .core.errors import CameraPathError
from .io.storage import LocalStorage
from .settings import CameraPathSettings, configure_logging


logger = logging.getLogger("campath")


def _serve(args: argparse.Namespace, settings: CameraPathSettings) -> int:
    from .runner import run

    srv = run(host=args.host, port=args.port, settings=settings, log_level=settings.log_level.lower())
    print(getattr(srv, "url", None) or getattr(srv, "base_url", ""))

    # Block forever (so it behaves like a normal CLI server)
    while True:
        time.sleep(3600)


def _bake(args: argparse.Namespace, settings: CameraPathSettings) -> int:
    storage = LocalStorage()
    trajectory = load_trajectory(storage, args.input, look_at_up=args.look_at_up)
    if args.sort:
        trajectory.sort()
    if args.fps is not None:
        trajectory.set_fps(args.fps)
    out_look_at_up = args.look_at_up if args.output_look_at_up is None else args.output_look_at_up
    path = save_full_path(storage, args.output, trajectory, look_at_up=out_look_at_up, aspect=settings.aspect)
    print(path)
    return 0


def _info(args: argparse.Namespace, settings: CameraPathSettings) -> int:
    trajectory = load_trajectory(LocalStorage(), args.input, look_at_up=args.look_at_up)
    print(f"Keyframes: {len(trajectory.keyframes)}")
    print(f"Total Duration: {trajectory.total_duration:.2f}s")
    print(f"FPS: {trajectory.fps}")
    print(f"Scale: {trajectory.scale}")
    for i, kf in enumerate(trajectory.keyframes):
        x, y, z = kf.position
        print(f"KF {i}: {kf.time:.2f}s ({x:.2f}, {y:.2f}, {z:.2f})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="campath", description="campath: keyframed camera paths")
    p.add_argument("--log-level", default=None, help="Overrides CAMPATH_LOG_LEVEL")
    p.add_argument("--aspect", default=None, help="Aspect string written to exported files, e.g. 1920/1080")
    sub = p.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=_serve)

    bake = sub.add_parser("bake", help="Resample a keyframe file into a full camera path")
    bake.add_argument("input")
    bake.add_argument("output")
    bake.add_argument("--look-at-up", action="store_true", help="Input uses the lookAt/up schema")
    bake.add_argument(
        "--output-look-at-up",
        dest="output_look_at_up",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Schema of the output (defaults to the input schema)",
    )
    bake.add_argument("--fps", type=int, default=None)
    bake.add_argument("--sort", action="store_true", help="Sort keyframes by time before baking")
    bake.set_defaults(func=_bake)

    info = sub.add_parser("info", help="Print a summary of a camera path file")
    info.add_argument("input")
    info.add_argument("--look-at-up", action="store_true")
    info.set_defaults(func=_info)
    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    settings = CameraPathSettings.from_env().override(
        log_level=args.log_level.upper() if args.log_level else None,
        aspect=args.aspect,
    )
    configure_logging(settings.log_level)

    if getattr(args, "func", None) is None:
        p.print_help()
        return 2
    try:
        return int(args.func(args, settings))
    except CameraPathError as ex:
        logger.error("%s", ex)
        return 1


if __name__ == "__main__":
    sys.exit(main())
