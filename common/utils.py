from __future__ import annotations

import math
import os
import time
from pathlib import Path
from typing import Union

PathLike = Union[str, os.PathLike]


def as_whole(value: float) -> int | None:
    """Return value as int when it is an exact integer, else None."""
    if not math.isfinite(value):
        return None
    i = int(round(value))
    return i if float(i) == value else None


def can_read_file(path: PathLike) -> bool:
    p = Path(path)
    return p.is_file() and os.access(p, os.R_OK)


def can_write_file(path: PathLike) -> bool:
    """True if `path` can be created or overwritten."""
    p = Path(path)
    if p.exists():
        return p.is_file() and os.access(p, os.W_OK)
    parent = p.parent if str(p.parent) else Path(".")
    return parent.is_dir() and os.access(parent, os.W_OK)


def timer_ms(func):
    """
    Decorator that returns (result, elapsed_ms) for benchmarking small functions.
    """
    def wrapper(*args, **kwargs):
        t0 = time.perf_counter()
        out = func(*args, **kwargs)
        dt_ms = (time.perf_counter() - t0) * 1e3
        return out, dt_ms
    return wrapper
