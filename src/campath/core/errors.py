from __future__ import annotations


class CameraPathError(Exception):
    """Base class for every error raised by campath."""


class InsufficientKeyframes(CameraPathError, ValueError):
    def __init__(self, count: int, required: int = 2) -> None:
        super().__init__(f"At least {required} keyframes are required, got {count}")
        self.count = int(count)
        self.required = int(required)


class InvalidParameter(CameraPathError, ValueError):
    pass


class IndexOutOfRange(CameraPathError, IndexError):
    def __init__(self, index: int, count: int) -> None:
        if count > 0:
            msg = f"Index {index} is invalid, must be between 0 and {count - 1}"
        else:
            msg = f"Index {index} is invalid, the trajectory has no keyframes"
        super().__init__(msg)
        self.index = int(index)
        self.count = int(count)


class ParseError(CameraPathError, ValueError):
    pass


class FileNotFound(CameraPathError, FileNotFoundError):
    pass


class DirectoryNotFound(CameraPathError, FileNotFoundError):
    pass
