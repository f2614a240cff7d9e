"""
Unit tests for change notification
"""

import os
import sys
from unittest.mock import Mock

project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from terrain.notify import LoggingChangeSink, notify_best_effort
from tests.factories import make_region


class TestNotify:
    """Best-effort delivery of one batch per operation"""

    def test_batch_is_delivered_once(self):
        sink = Mock()
        regions = [make_region(0, 0), make_region(1, 0)]
        assert notify_best_effort(sink, regions) is True
        sink.regions_changed.assert_called_once_with(regions)

    def test_empty_batch_is_not_sent(self):
        sink = Mock()
        assert notify_best_effort(sink, []) is True
        sink.regions_changed.assert_not_called()

    def test_failing_sink_is_swallowed_and_reported(self):
        sink = Mock()
        sink.regions_changed.side_effect = RuntimeError("viewer offline")
        assert notify_best_effort(sink, [make_region(0, 0)]) is False

    def test_logging_sink_counts_batches(self):
        sink = LoggingChangeSink()
        notify_best_effort(sink, [make_region(0, 0)])
        notify_best_effort(sink, [make_region(1, 0)])
        assert sink.batches == 2
