"""Finds the RPMs to validate below a target directory."""
import logging
from pathlib import Path
from typing import List

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def check_target_dir(target_dir: str) -> str:
    """Returns the absolute path of `target_dir`, which must be a directory.

    Raises:
        ConfigurationError: If the path does not exist or is not a directory.
    """
    path = Path(target_dir)
    if not path.is_dir():
        raise ConfigurationError(f"Could not find directory at {target_dir}")
    return str(path.resolve())


def find_packages(target_dir: str, pattern: str = "*.rpm") -> List[str]:
    """Lists every regular file matching `pattern` below `target_dir`.

    Args:
        target_dir (str): The directory to search recursively.
        pattern (str): The glob matching package file names.

    Returns:
        List[str]: Absolute, de-duplicated paths, sorted so that reports are
        stable between runs.
    """
    root = check_target_dir(target_dir)
    packages = sorted({str(p.resolve()) for p in Path(root).rglob(pattern) if p.is_file()})
    logger.info(f"Found {len(packages)} package(s) under {root}")
    return packages
