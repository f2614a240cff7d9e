from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from common.config import TerrainSettings
from common.errors import TerrainToolsError
from common.logging_setup import get_logger
from common.types import Region
from loaders.registry import LoaderRegistry, TerrainLoader
from terrain.grid import RegionGrid

log = get_logger("terrain.store")


class RegionStore:
    """
    Scans a directory of per-region heightmaps and keeps them in step with a grid.

        root/
          └─ {x}/
              ├─ {y}.r32   (heightmap, format from settings.region_format)
              └─ {y}.json  (optional: {"name": "..."})

    The store is also a change sink: regions reported as changed are written back
    to their files.
    """

    def __init__(self, settings: TerrainSettings, registry: LoaderRegistry, root: Optional[str] = None):
        self.settings = settings
        self.root = Path(root or settings.regions_root)
        self.loader: TerrainLoader = registry.for_file("region" + settings.region_format)
        self._paths: Dict[Tuple[int, int], Path] = {}

    # -------- public API --------

    def scan(self) -> List[Region]:
        """Load every well-formed region file under root; malformed entries are skipped."""
        self._paths.clear()
        regions: List[Region] = []
        if not self.root.exists():
            return regions
        for hm in sorted(self.root.rglob("*" + self.settings.region_format)):
            try:
                x = int(hm.parent.name)
                y = int(hm.stem)
            except ValueError:
                continue
            try:
                heights = self.loader.load(hm)
                region = Region(x=x, y=y, name=self._read_name(hm, x, y), heightmap=heights.copy())
            except (OSError, ValueError, TerrainToolsError) as e:
                log.warning("Skipping unreadable region file", extra={"extra": {"file": str(hm), "error": str(e)}})
                continue
            if region.size != self.settings.region_size:
                log.warning("Skipping region of wrong size", extra={"extra": {"file": str(hm), "size": region.size}})
                continue
            self._paths[region.coord] = hm
            regions.append(region)
        log.info("Scanned region store", extra={"extra": {"root": str(self.root), "regions": len(regions)}})
        return regions

    def load_grid(self) -> RegionGrid:
        return RegionGrid(self.settings.region_size, self.scan())

    def save_region(self, region: Region) -> Path:
        path = self._paths.get(region.coord) or self.path_for(region.x, region.y)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.loader.save(path, region.heightmap)
        path.with_suffix(".json").write_text(json.dumps({"name": region.name}, indent=2))
        self._paths[region.coord] = path
        return path

    def path_for(self, x: int, y: int) -> Path:
        return self.root / str(int(x)) / f"{int(y)}{self.settings.region_format}"

    def regions_changed(self, regions: Sequence[Region]) -> None:
        for region in regions:
            self.save_region(region)
        log.info("Persisted changed regions", extra={"extra": {"regions": [r.name for r in regions]}})

    # -------- internals --------

    @staticmethod
    def _read_name(hm: Path, x: int, y: int) -> str:
        meta = hm.with_suffix(".json")
        if meta.exists():
            try:
                name = json.loads(meta.read_text()).get("name")
            except (OSError, ValueError, AttributeError):
                name = None
            if name:
                return str(name)
        return f"Region {x},{y}"
