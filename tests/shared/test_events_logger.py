"""Tests for the EVENT-level receipt log."""

import json
import os

from gridstake.shared.logging import log_event, setup_events_logger


class TestEventsLogger:

    def test_writes_json_receipts(self, tmp_path):
        logger = setup_events_logger(tmp_path / "events")
        log_event(logger, {"op": "stake", "ok": True})
        for handler in logger.handlers:
            handler.flush()

        line = (tmp_path / "events" / "events.log").read_text().strip().splitlines()[-1]
        level, payload = line.split(" | ")[1:]
        assert level == "EVENT"
        assert json.loads(payload) == {"ok": True, "op": "stake"}

    def test_reuses_handler_for_same_directory(self, tmp_path):
        first = setup_events_logger(tmp_path)
        second = setup_events_logger(tmp_path)
        path = os.path.abspath(tmp_path / "events.log")
        assert first is second
        assert sum(getattr(h, "baseFilename", None) == path for h in second.handlers) == 1
