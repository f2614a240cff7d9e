"""Small builders shared by the unit and integration tests."""

import numpy as np

from common.types import Region, new_heightmap

RS = 16


def make_region(x, y, fill=0.0, name=None):
    return Region(x=x, y=y, name=name or f"R{x},{y}", heightmap=new_heightmap(RS, fill))


def ramp_region(x, y, offset=0.0):
    """Heightmap whose value encodes its own sample position: row * 100 + col + offset."""
    hm = np.add.outer(np.arange(RS) * 100.0, np.arange(RS)).astype(np.float32) + offset
    return Region(x=x, y=y, name=f"R{x},{y}", heightmap=hm)
