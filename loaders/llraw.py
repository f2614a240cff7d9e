"""
Legacy LLRAW heightmaps (.raw).

Every sample is a 13-byte record:
    byte 0      elevation base
    byte 1      scale, elevation = byte0 * (byte1 / 128.0)
    bytes 2-12  unused here, written as zero
Records are row-major from the southern row upward. The format has no header,
so the region count comes from the caller or from the file length.
"""
from __future__ import annotations

from pathlib import Path

import numpy as np

from common.logging_setup import get_logger
from common.utils import PathLike
from loaders.registry import HeaderlessLoader
from terrain.sizing import LLRAW_BYTES_PER_SAMPLE

log = get_logger("loaders.llraw")


def _build_lookup() -> tuple:
    base = np.arange(256, dtype=np.float64)
    scale = np.arange(256, dtype=np.float64) / 128.0
    # index k = scale_byte * 256 + base_byte
    table = (scale[:, np.newaxis] * base[np.newaxis, :]).ravel()
    order = np.argsort(table, kind="stable")
    return table[order], order


_SORTED_VALUES, _SORTED_INDEX = _build_lookup()


def decode_records(data: bytes, rows: int, cols: int) -> np.ndarray:
    rec = np.frombuffer(data, dtype=np.uint8, count=rows * cols * LLRAW_BYTES_PER_SAMPLE)
    rec = rec.reshape(rows * cols, LLRAW_BYTES_PER_SAMPLE)
    heights = rec[:, 0].astype(np.float64) * (rec[:, 1].astype(np.float64) / 128.0)
    return heights.reshape(rows, cols).astype(np.float32)


def encode_records(heightmap: np.ndarray) -> bytes:
    """Pick, per sample, the (base, scale) byte pair that decodes closest to its elevation."""
    flat = np.clip(heightmap.astype(np.float64).ravel(), _SORTED_VALUES[0], _SORTED_VALUES[-1])
    hi = np.clip(np.searchsorted(_SORTED_VALUES, flat), 1, _SORTED_VALUES.size - 1)
    lo = hi - 1
    pick = np.where(flat - _SORTED_VALUES[lo] <= _SORTED_VALUES[hi] - flat, lo, hi)
    k = _SORTED_INDEX[pick]
    rec = np.zeros((flat.size, LLRAW_BYTES_PER_SAMPLE), dtype=np.uint8)
    rec[:, 0] = (k % 256).astype(np.uint8)
    rec[:, 1] = (k // 256).astype(np.uint8)
    return rec.tobytes()


class LLRawLoader(HeaderlessLoader):
    extensions = (".raw",)
    bytes_per_sample = LLRAW_BYTES_PER_SAMPLE

    def load_sized(self, path: PathLike, width_regions: int, height_regions: int) -> np.ndarray:
        rs = self.settings.region_size
        data = self._read_exact(path, width_regions, height_regions)
        log.info(
            "Loaded LLRAW heightmap",
            extra={"extra": {"file": Path(path).name, "width": width_regions, "height": height_regions}},
        )
        return decode_records(data, height_regions * rs, width_regions * rs)

    def save(self, path: PathLike, heightmap: np.ndarray) -> None:
        with open(path, "wb") as f:
            f.write(encode_records(heightmap))
