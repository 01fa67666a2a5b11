"""Package discovery under ``<root>/p``."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Union

from constants import Constants

from .package import Package, PackageConfigError

logger = logging.getLogger(__name__)


def find_all(root: Union[str, Path]) -> List[Package]:
    """Find every package below ``<root>/p``, sorted by name.

    A package is any directory holding a file named ``config``; packages may
    be nested (``py/build``). A directory containing only nested packages is
    not a package itself.

    Raises:
        PackageConfigError: If a discovered config is invalid, or the packages
            directory is missing.
    """
    packages_dir = Path(root) / Constants.PACKAGES_DIR
    if not packages_dir.is_dir():
        raise PackageConfigError(f"Packages directory '{packages_dir}' does not exist")

    packages: List[Package] = []
    for dirpath, dirnames, filenames in os.walk(packages_dir):
        dirnames.sort()
        if Path(dirpath) == packages_dir:
            continue
        if Constants.PACKAGE_CONFIG_FILE in filenames:
            path = Path(dirpath) / Constants.PACKAGE_CONFIG_FILE
            if not path.is_file():
                continue
            # Channel output files are not packages, even one named "config"
            if Constants.CHANNELS_DIR in dirnames:
                dirnames.remove(Constants.CHANNELS_DIR)
            try:
                packages.append(Package.from_config_path(path, root))
            except PackageConfigError as exc:
                raise PackageConfigError(
                    f"Failed to form package from config at '{path}': {exc}"
                ) from exc

    packages.sort()
    logger.debug("Discovered %d packages", len(packages))
    return packages
