"""Tests for the log formatters and handler setup."""
import json
import logging
import sys

from itemstore.logging_config import HumanFormatter, JSONFormatter, configure_logging


def make_record(message="Applied action", **extra):
    record = logging.LogRecord(
        name="itemstore.core.store",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_structured_fields(self):
        record = make_record(subsystem="store", seq=4, action_type="row_move", generation=2)
        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "itemstore.core.store"
        assert data["message"] == "Applied action"
        assert data["seq"] == 4
        assert data["action_type"] == "row_move"
        assert data["generation"] == 2
        assert "latency_ms" not in data

    def test_exception(self):
        try:
            raise IndexError("index 9 out of range")
        except IndexError:
            record = make_record()
            record.exc_info = sys.exc_info()
        data = json.loads(JSONFormatter().format(record))
        assert "IndexError" in data["exception"]


class TestHumanFormatter:
    def test_prefix_and_latency(self):
        record = make_record("Effect 1 delivered", subsystem="effects", generation=3, latency_ms=12.34)
        line = HumanFormatter(use_colors=False).format(record)

        assert "[itemstore.core.store]" in line
        assert "[effects]" in line
        assert "gen=3" in line
        assert line.endswith("Effect 1 delivered (12.3ms)")

    def test_plain_record(self):
        line = HumanFormatter(use_colors=False).format(make_record())
        assert line.endswith("[itemstore.core.store]: Applied action")


def test_configure_logging_with_log_dir(tmp_path, restore_root_logger):
    configure_logging(level="debug", log_dir=str(tmp_path))
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 3

    logging.getLogger("itemstore.test").info("hello", extra={"subsystem": "test"})
    for handler in root.handlers:
        handler.flush()

    line = (tmp_path / "itemstore.json.log").read_text().strip().splitlines()[-1]
    assert json.loads(line)["subsystem"] == "test"
