from __future__ import annotations

from typing import Protocol, Sequence

from common.logging_setup import get_logger
from common.types import Region

log = get_logger("terrain.notify")


class ChangeSink(Protocol):
    """Receives one batch of modified regions after each mutating operation."""

    def regions_changed(self, regions: Sequence[Region]) -> None:
        ...


class LoggingChangeSink:
    """Sink for hosts with nothing to propagate to; records the batch only."""

    def __init__(self) -> None:
        self.batches = 0

    def regions_changed(self, regions: Sequence[Region]) -> None:
        self.batches += 1
        log.info("Terrain changed", extra={"extra": {"regions": [r.name for r in regions]}})


def notify_best_effort(sink: ChangeSink, regions: Sequence[Region]) -> bool:
    """
    Deliver a batch to the sink. A failing sink is logged and reported as False;
    the heightmaps have already been modified and stay modified.
    """
    if not regions:
        return True
    try:
        sink.regions_changed(list(regions))
    except Exception:
        log.warning(
            "Change notification failed; regions were modified but not propagated",
            exc_info=True,
            extra={"extra": {"regions": [r.name for r in regions]}},
        )
        return False
    return True
