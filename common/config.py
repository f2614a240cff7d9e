from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_PARAMS: Dict[str, Any] = {
    "terrain": {
        "region_size": 256,
        "regions_root": "data/regions",
        "region_format": ".r32",
        "image_height_scale": 128.0,
    },
    "logging": {"level": "INFO", "format": "json"},
    "server": {"host": "0.0.0.0", "port": 8000},
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_params(path: str = "config/params.yaml") -> Dict[str, Any]:
    """
    Read the YAML parameter file and lay it over DEFAULT_PARAMS.
    A missing file yields the defaults unchanged.
    """
    p = Path(path)
    if not p.exists():
        return copy.deepcopy(DEFAULT_PARAMS)
    with p.open("r") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return _merge(DEFAULT_PARAMS, loaded)


@dataclass(frozen=True, slots=True)
class TerrainSettings:
    """
    Per-grid settings injected into TerrainTools and the loaders.

    Attributes:
        region_size: edge length in samples of every region heightmap.
        regions_root: directory scanned by RegionStore.
        region_format: extension used for per-region files in the store.
        image_height_scale: elevation represented by a full-white image pixel.
    """
    region_size: int = 256
    regions_root: str = "data/regions"
    region_format: str = ".r32"
    image_height_scale: float = 128.0

    def __post_init__(self) -> None:
        if self.region_size <= 0 or self.region_size % 2:
            raise ValueError("region_size must be a positive even number")
        if self.image_height_scale <= 0:
            raise ValueError("image_height_scale must be > 0")

    @classmethod
    def from_params(cls, params: Optional[Dict[str, Any]] = None) -> "TerrainSettings":
        T = (params or DEFAULT_PARAMS).get("terrain", {})
        return cls(
            region_size=int(T.get("region_size", 256)),
            regions_root=str(T.get("regions_root", "data/regions")),
            region_format=str(T.get("region_format", ".r32")).lower(),
            image_height_scale=float(T.get("image_height_scale", 128.0)),
        )
