"""Path filters deciding whether a request gets a per-path timing metric."""
from __future__ import annotations

from typing import Callable, Tuple

PathFilter = Callable[[str], Tuple[bool, str]]


def nop_filter(path: str) -> Tuple[bool, str]:
    """Record every path exactly as received."""
    return True, path


def filter_url(path: str) -> Tuple[bool, str]:
    """Record every path, dropping the query string."""
    return True, path.split("?", 1)[0]
