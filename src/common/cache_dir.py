"""Cache directory lifecycle and small run bookkeeping files."""
from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path
from typing import Mapping, Optional, Union

from constants import Constants

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def clean_cache(cache_dir: PathLike, timeout: float, now: Optional[float] = None) -> None:
    """Ensure the cache directory exists, recreating it once it is older than ``timeout`` seconds."""
    cache_dir = Path(cache_dir)
    now = time.time() if now is None else now
    try:
        mtime = cache_dir.stat().st_mtime
    except FileNotFoundError:
        cache_dir.mkdir(parents=True)
        return

    if now - mtime > timeout:
        logger.debug("Removing cache")
        shutil.rmtree(cache_dir)
        cache_dir.mkdir(parents=True)


def write_counters(cache_dir: PathLike, counters: Mapping[str, int]) -> None:
    """Write each counter to a file of the same name."""
    cache_dir = Path(cache_dir)
    cache_dir.mkdir(parents=True, exist_ok=True)
    for name, value in counters.items():
        (cache_dir / name).write_text(str(value), encoding="utf-8")


def increment_runcount(path: PathLike) -> int:
    """Increment the integer stored at ``path``; a missing or garbled file counts as 0."""
    path = Path(path)
    try:
        current = int(path.read_text(encoding="utf-8").strip())
    except (OSError, ValueError):
        current = 0
    runcount = current + 1
    path.write_text(str(runcount), encoding="utf-8")
    return runcount


def format_duration(seconds: float) -> str:
    """Human-readable duration such as ``1m 2s 345ms``."""
    millis_total = int(round(max(0.0, seconds) * 1000))
    hours, rem = divmod(millis_total, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, millis = divmod(rem, 1000)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs:
        parts.append(f"{secs}s")
    if millis or not parts:
        parts.append(f"{millis}ms")
    return " ".join(parts)


def write_elapsed(cache_dir: PathLike, elapsed: str) -> None:
    Path(cache_dir).mkdir(parents=True, exist_ok=True)
    (Path(cache_dir) / Constants.ELAPSED_FILE).write_text(elapsed, encoding="utf-8")
