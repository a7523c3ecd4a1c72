"""
Source Loader

Validates batch-mode source files and joins their contents into one
buffer, so later files can use names defined by earlier ones.
"""

import logging
from pathlib import Path
from typing import List, Sequence

from ..config import SOURCE_SUFFIX

logger = logging.getLogger(__name__)


class LoaderError(Exception):
    """Base exception for source loading failures."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(message)


class FileValidationError(LoaderError):
    """Raised when a path is missing, not a regular file or misnamed."""

    def __init__(self, path: str):
        super().__init__(path, f"{path} is not a file")


class FileReadError(LoaderError):
    """Raised when a validated file cannot be read."""

    def __init__(self, path: str):
        super().__init__(path, f"Error reading file {path}")


def is_source_file(path: Path, suffix: str = SOURCE_SUFFIX) -> bool:
    """Check that a path is an existing regular file named like ``name.pesl``."""
    return (path.is_file()
            and path.name.endswith(suffix)
            and len(path.name) > len(suffix))


def load_sources(paths: Sequence[str], encoding: str = "utf-8",
                 suffix: str = SOURCE_SUFFIX) -> str:
    """
    Read source files in order and join them with a single space.

    Args:
        paths: Paths as given on the command line
        encoding: Text encoding of the files
        suffix: Required file name suffix

    Returns:
        The combined source buffer

    Raises:
        FileValidationError: At the first path that is not a valid source file
        FileReadError: At the first valid file that cannot be read
    """
    contents: List[str] = []

    for raw in paths:
        path = Path(raw)
        if not is_source_file(path, suffix):
            raise FileValidationError(raw)
        try:
            contents.append(path.read_text(encoding=encoding))
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Reading %s failed: %s", raw, e)
            raise FileReadError(raw) from e
        logger.debug("Loaded %s (%d characters)", raw, len(contents[-1]))

    return " ".join(contents)
