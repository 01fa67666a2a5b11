"""Shortform aliases for upstream URLs (``gh:owner/repo`` and friends)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class Shortform:
    """A prefix alias and the URL prefix it expands to."""

    short: str
    full: str


DEFAULT_SHORTFORMS: List[Shortform] = [
    # GitHub aliases
    Shortform("github:", "https://github.com/"),
    Shortform("gh:", "https://github.com/"),
    # GitLab aliases
    Shortform("gitlab:", "https://gitlab.com/"),
    Shortform("gl:", "https://gitlab.com/"),
    Shortform("dotgay:", "https://git.gay/"),
    # Codeberg aliases
    Shortform("codeberg:", "https://codeberg.org/"),
    Shortform("cb:", "https://codeberg.org/"),
    Shortform("freedesktop:", "https://gitlab.freedesktop.org/"),
    Shortform("inria:", "https://gitlab.inria.fr/"),
    Shortform("salsa:", "https://salsa.debian.org/"),
    Shortform("kernel:", "https://git.kernel.org/pub/scm/"),
    # SourceHut aliases
    Shortform("sourcehut:", "https://git.sr.ht/~"),
    Shortform("srht:", "https://git.sr.ht/~"),
]


def expand_upstream(upstream: str, shortforms: Iterable[Shortform]) -> str:
    """Expand a leading shortform alias in ``upstream``.

    The longest matching alias wins; strings without a known alias are
    returned unchanged.
    """
    best = None
    for sf in shortforms:
        if upstream.startswith(sf.short) and (best is None or len(sf.short) > len(best.short)):
            best = sf
    if best is None:
        return upstream
    return best.full + upstream[len(best.short):]
