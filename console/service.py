from __future__ import annotations

"""
Terrain tools CLI: run one command against the regions in the store.

Regions are scanned from terrain.regions_root; any region a command modifies is
written back to the store before the process exits.

Examples:
  python -m console.service help
  python -m console.service test data/island.r32
  python -m console.service load-part data/island.png 2 2 1000 1000
  python -m console.service --log-level DEBUG stitch 16
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

from common.config import TerrainSettings, load_params
from common.logging_setup import get_logger, setup_logging
from console.controller import TerrainToolsController
from loaders import default_registry
from terrain.store import RegionStore
from terrain.tools import TerrainTools

log = get_logger("console.service")


def build_controller(params: Dict[str, Any], root: Optional[str] = None) -> TerrainToolsController:
    """Wire settings, loaders, the region store and the tools together."""
    settings = TerrainSettings.from_params(params)
    registry = default_registry(settings)
    store = RegionStore(settings, registry, root=root)
    grid = store.load_grid()
    tools = TerrainTools(grid, registry, settings, sink=store)
    return TerrainToolsController(tools)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="OpenSim-style terrain tools")
    ap.add_argument("--config", default="config/params.yaml", help="YAML parameter file")
    ap.add_argument("--regions-root", default=None, help="Override terrain.regions_root")
    ap.add_argument("--log-level", default=None, help="DEBUG/INFO/WARNING/ERROR")
    ap.add_argument("command", help="Command name; 'help' lists them")
    ap.add_argument("args", nargs=argparse.REMAINDER, help="Command arguments")
    args = ap.parse_args(argv)

    params = load_params(args.config)
    L = params.get("logging", {})
    setup_logging(level=args.log_level or L.get("level"), fmt=L.get("format"))

    controller = build_controller(params, root=args.regions_root)
    result = controller.execute(args.command, args.args)
    print(result.message)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
