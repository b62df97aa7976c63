"""Directory existence check."""

import logging
import os
from typing import Union

from .exceptions import DirectoryDoesNotExist

logger = logging.getLogger(__name__)


def directory_exists(dir_path: Union[str, "os.PathLike[str]"]) -> None:
    """Verify that a path can be opened as a directory.

    Args:
        dir_path: Directory to check

    Raises:
        DirectoryDoesNotExist: If the path is missing, is not a directory,
            or cannot be opened
    """
    path = os.fspath(dir_path)
    try:
        with os.scandir(path):
            pass
    except OSError as e:
        logger.debug(f"Directory check failed for {path}: {e}")
        raise DirectoryDoesNotExist(path) from e
