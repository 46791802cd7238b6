from __future__ import annotations

from .errors import (
    CameraPathError,
    DirectoryNotFound,
    FileNotFound,
    IndexOutOfRange,
    InsufficientKeyframes,
    InvalidParameter,
    ParseError,
)
from .geometry import forward_vector, look_at_quaternion, look_rotation, slerp, up_vector
from .keyframe import Keyframe, Pose
from .trajectory import SphereSettings, Trajectory
from .sampler import sample, sample_frames
from .codec import (
    LoadedPath,
    decode_trajectory,
    encode_full_path,
    encode_trajectory,
    load_trajectory,
    load_trajectory_set,
    save_full_path,
    save_trajectory,
)
from .camera import Clock, FixedStepClock, MonotonicClock, Renderer, VirtualCamera
from .playback import PlaybackDriver, PlaybackState
from .session import CameraPathSession

__all__ = [
    "CameraPathError",
    "InsufficientKeyframes",
    "InvalidParameter",
    "IndexOutOfRange",
    "ParseError",
    "FileNotFound",
    "DirectoryNotFound",
    "forward_vector",
    "up_vector",
    "look_rotation",
    "look_at_quaternion",
    "slerp",
    "Keyframe",
    "Pose",
    "SphereSettings",
    "Trajectory",
    "sample",
    "sample_frames",
    "LoadedPath",
    "encode_trajectory",
    "encode_full_path",
    "decode_trajectory",
    "load_trajectory",
    "save_trajectory",
    "save_full_path",
    "load_trajectory_set",
    "Clock",
    "Renderer",
    "VirtualCamera",
    "MonotonicClock",
    "FixedStepClock",
    "PlaybackDriver",
    "PlaybackState",
    "CameraPathSession",
]
