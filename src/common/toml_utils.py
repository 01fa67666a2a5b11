"""TOML loading shared by the global and per-package configuration readers."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Union

if sys.version_info >= (3, 11):
    import tomllib as toml
else:
    import tomli as toml

TOMLDecodeError = toml.TOMLDecodeError


def load_toml(path: Union[str, Path]) -> Dict[str, Any]:
    """Parse a TOML file into a dict.

    Raises:
        OSError: If the file cannot be read.
        TOMLDecodeError: If the content is not valid TOML.
    """
    with open(path, "rb") as fh:
        return toml.load(fh)
