"""Fetching: the per-package policy and the bulk scheduler."""

from .bulk import fetch_all, write_all
from .policy import FetchPolicy

__all__ = ["fetch_all", "write_all", "FetchPolicy"]
