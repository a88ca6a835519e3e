from __future__ import annotations

from datetime import datetime


def now_local() -> datetime:
    """Current school-local wall-clock time.

    Controllers take this as their default `clock`; tests pass a fixed one.
    """
    return datetime.now()
