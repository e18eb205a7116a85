"""Error types raised while building and persisting images."""

from unattend_iso.diagnostics import BUILD_ERROR, IO_ERROR
from unattend_iso.types import BuildStage


class ImageError(Exception):
    """Base error for image operations."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class BuildError(ImageError):
    """Image construction failed.

    Attributes:
        stage: Which encoder step failed.
    """

    def __init__(self, message: str, stage: BuildStage) -> None:
        super().__init__(message, code=BUILD_ERROR)
        self.stage = stage


class ImageIOError(ImageError):
    """Resolving or writing the destination file failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, code=IO_ERROR)
        self.path = path


__all__ = ["BuildError", "ImageError", "ImageIOError"]
