"""
Command controller for the terrain tools.

Parses console-style arguments, checks that a command can run (files readable or
writable, format registered, window inside the grid) and only then invokes
TerrainTools. Every call returns one CommandResult; no exception escapes.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Sequence, Tuple

from common.errors import TerrainToolsError
from common.logging_setup import get_logger
from common.types import TileWindow
from common.utils import can_read_file, can_write_file, timer_ms
from terrain.tools import TerrainTools

log = get_logger("console.controller")

WINDOW_ARGS = "<num regions X> <num regions Y> <X start> <Y start>"


@dataclass(frozen=True, slots=True)
class CommandResult:
    ok: bool
    message: str

    def to_dict(self) -> Dict[str, object]:
        return {"ok": self.ok, "message": self.message}


@dataclass(frozen=True, slots=True)
class CommandSpec:
    name: str
    usage: str
    help: str
    handler: Callable[[Sequence[str]], CommandResult]


def _ok(text: str) -> CommandResult:
    return CommandResult(True, text)


def _error(text: str) -> CommandResult:
    return CommandResult(False, text)


def _parse_window(args: Sequence[str]) -> TileWindow:
    """num_x num_y start_x start_y, in that order."""
    num_x, num_y, start_x, start_y = (int(a) for a in args[:4])
    if num_x <= 0 or num_y <= 0:
        raise ValueError("region counts must be > 0")
    return TileWindow(start_x=start_x, start_y=start_y, num_x=num_x, num_y=num_y)


class TerrainToolsController:
    """Maps command names onto TerrainTools operations."""

    def __init__(self, tools: TerrainTools):
        self.tools = tools
        self.commands: Dict[str, CommandSpec] = {}
        self._install_commands()

    # -------- dispatch --------

    def execute(self, name: str, args: Sequence[str] = ()) -> CommandResult:
        entry = self.commands.get(name)
        if entry is None:
            return _error(f"Unknown command '{name}', try 'help'")
        args = [str(a) for a in args]
        n_required = entry.usage.count("<")
        if len(args) < n_required:
            return _error(f"Usage: {entry.name} {entry.usage}")
        try:
            result, dt_ms = timer_ms(entry.handler)(args)
        except (TerrainToolsError, ValueError) as e:
            log.warning("Command failed", extra={"extra": {"command": name, "error": str(e)}})
            return _error(str(e))
        except OSError as e:
            log.warning("Command failed with I/O error", exc_info=True, extra={"extra": {"command": name}})
            return _error(f"I/O error: {e}")
        log.info(
            "Command finished",
            extra={"extra": {"command": name, "ok": result.ok, "latency_ms": int(dt_ms)}},
        )
        return result

    def help_text(self) -> str:
        lines = [f"{s.name} {s.usage}".rstrip() + f" - {s.help}" for s in self.commands.values()]
        return "\n".join(lines)

    # -------- registration --------

    def _add(self, name: str, usage: str, help_text: str, handler: Callable[[Sequence[str]], CommandResult]) -> None:
        self.commands[name] = CommandSpec(name=name, usage=usage, help=help_text, handler=handler)

    def _install_commands(self) -> None:
        self._add("load", "<filename>", "Tiles all the regions from the given file", self.cmd_load_all)
        self._add("save", "<filename>", "Saves the heightmap of all the regions as a single file", self.cmd_save_all)
        self._add("stitch", "<depth>", "Smooths the edges of the heightmaps between all the regions", self.cmd_stitch_all)
        self._add("split", "<filename>", "Saves every region's heightmap as an individual file", self.cmd_split_all)
        self._add("load-part", f"<filename> {WINDOW_ARGS}", "Loads a terrain from a section of a larger file", self.cmd_load_part)
        self._add("save-part", f"<filename> {WINDOW_ARGS}", "Saves a number of regions' terrains to a single file", self.cmd_save_part)
        self._add("stitch-part", f"<depth> {WINDOW_ARGS}", "Smooths the edges of a number of regions", self.cmd_stitch_part)
        self._add("split-part", f"<filename> {WINDOW_ARGS}", "Saves the heightmaps in the area as individual files", self.cmd_split_part)
        self._add("test", "<filename>", "Checks if a terrain file is valid", self.cmd_test)
        self._add("convert", "<source file> <destination file>", "Converts a terrain file to a different file type", self.cmd_convert)
        self._add("rescale", "<min elevation> <max elevation>", "Rescales the heightmap of all the regions", self.cmd_rescale_all)
        self._add("rescale-part", f"<min elevation> <max elevation> {WINDOW_ARGS}", "Rescales the heightmap of a number of regions", self.cmd_rescale_part)
        self._add("help", "", "Lists the available commands", lambda args: _ok(self.help_text()))

    # -------- shared checks --------

    def _check_readable(self, path: Path) -> CommandResult | None:
        if not can_read_file(path):
            return _error(f"The file {path} does not exist")
        if not self.tools.is_loader_registered(path):
            return _error(f"No loader is registered for files of type '{path.suffix}'")
        return None

    def _check_writable(self, path: Path) -> CommandResult | None:
        if not can_write_file(path):
            return _error(f"Cannot write to {path}")
        if not self.tools.is_loader_registered(path):
            return _error(f"No loader is registered for files of type '{path.suffix}'")
        return None

    def _check_window(self, window: TileWindow) -> CommandResult | None:
        if not self.tools.check_dimensions_are_valid(window):
            return _error("The parameters exceed the bounds of the regions hosted in this grid")
        return None

    def _check_rectangular(self, alternative: str) -> CommandResult | None:
        if not self.tools.grid.is_rectangular_complete():
            return _error(
                f"Regions do not form a contiguous, rectangular shape, consider using the '{alternative}' command instead"
            )
        return None

    # -------- commands --------

    def cmd_split_all(self, args: Sequence[str]) -> CommandResult:
        path = Path(args[0])
        failure = self._check_writable(path)
        if failure:
            return failure
        written = self.tools.split_all(path)
        return _ok(f"Wrote {len(written)} region files from {path}")

    def cmd_split_part(self, args: Sequence[str]) -> CommandResult:
        path = Path(args[0])
        window = _parse_window(args[1:])
        failure = self._check_writable(path) or self._check_window(window)
        if failure:
            return failure
        written = self.tools.split_part(window, path)
        return _ok(f"Wrote {len(written)} region files from {path}")

    def cmd_convert(self, args: Sequence[str]) -> CommandResult:
        src, dst = Path(args[0]), Path(args[1])
        if not can_read_file(src):
            return _error("File to read from does not exist")
        if not can_write_file(dst):
            return _error("Cannot write the output file")
        if not self.tools.is_loader_registered(src):
            return _error("Cannot parse the input file, no loader is registered for files of this type")
        if not self.tools.is_loader_registered(dst):
            return _error("Cannot write the output file, no loader is registered for files of this type")
        width, height = self.tools.convert(src, dst)
        return _ok(f"Converted {src} to {dst} ({width}x{height} regions)")

    def cmd_test(self, args: Sequence[str]) -> CommandResult:
        path = Path(args[0])
        failure = self._check_readable(path)
        if failure:
            return failure
        if not self.tools.is_whole_number_of_regions(path):
            return _error(f"File {path} Invalid: The file does not tile a whole number of regions")
        width, height = self.tools.determine_file_size(path)
        return _ok(f"File {path} can be loaded by the Terrain Tools. It will tile W={width}, H={height} regions")

    def cmd_load_all(self, args: Sequence[str]) -> CommandResult:
        path = Path(args[0])
        failure = self._check_readable(path) or self._check_rectangular("load-part")
        if failure:
            return failure
        width, height = self.tools.determine_file_size(path)
        if not self.tools.grid.dimensions_match(width, height):
            return _error(
                "File is the wrong size to tile all the regions in this grid, consider using the 'load-part' command instead"
            )
        window = self.tools.load_all(path)
        return _ok(f"Loaded {path} into {window.num_x}x{window.num_y} regions")

    def cmd_save_all(self, args: Sequence[str]) -> CommandResult:
        path = Path(args[0])
        failure = self._check_writable(path) or self._check_rectangular("save-part")
        if failure:
            return failure
        window = self.tools.save_all(path)
        return _ok(f"Saved {window.num_x}x{window.num_y} regions to {path}")

    def cmd_stitch_all(self, args: Sequence[str]) -> CommandResult:
        width = int(args[0])
        touched = self.tools.stitch_all(width)
        return _ok(f"Stitched {len(touched)} regions with depth {width}")

    def cmd_stitch_part(self, args: Sequence[str]) -> CommandResult:
        width = int(args[0])
        window = _parse_window(args[1:])
        failure = self._check_window(window)
        if failure:
            return failure
        touched = self.tools.stitch_part(width, window)
        return _ok(f"Stitched {len(touched)} regions with depth {width}")

    def cmd_save_part(self, args: Sequence[str]) -> CommandResult:
        path = Path(args[0])
        window = _parse_window(args[1:])
        failure = self._check_window(window) or self._check_writable(path)
        if failure:
            return failure
        self.tools.save_part(window, path)
        return _ok(f"Saved {window.num_x}x{window.num_y} regions to {path}")

    def cmd_load_part(self, args: Sequence[str]) -> CommandResult:
        path = Path(args[0])
        window = _parse_window(args[1:])
        failure = self._check_window(window) or self._check_readable(path)
        if failure:
            return failure
        touched = self.tools.load_part(window, path)
        return _ok(f"Loaded {path} into {len(touched)} regions")

    def cmd_rescale_all(self, args: Sequence[str]) -> CommandResult:
        desired_min, desired_max = _parse_range(args)
        if desired_max < desired_min:
            return _error("Invalid parameters, Max Value is less than Min Value")
        failure = self._check_rectangular("rescale-part")
        if failure:
            return failure
        touched = self.tools.rescale_all(desired_min, desired_max)
        return _ok(f"Rescaled {len(touched)} regions to [{desired_min}, {desired_max}]")

    def cmd_rescale_part(self, args: Sequence[str]) -> CommandResult:
        desired_min, desired_max = _parse_range(args)
        window = _parse_window(args[2:])
        if desired_max < desired_min:
            return _error("Invalid parameters, Max Value is less than Min Value")
        failure = self._check_window(window)
        if failure:
            return failure
        touched = self.tools.rescale_part(desired_min, desired_max, window)
        return _ok(f"Rescaled {len(touched)} regions to [{desired_min}, {desired_max}]")


def _parse_range(args: Sequence[str]) -> Tuple[float, float]:
    low, high = float(args[0]), float(args[1])
    if not (math.isfinite(low) and math.isfinite(high)):
        raise ValueError("Invalid parameters, elevations must be finite numbers")
    return low, high
