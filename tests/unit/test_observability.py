"""Tests for observability/logger.py"""
import io
import json
import logging
import sys

import pytest

from sceneshare.observability.logger import (
    ROOT_LOGGER,
    StructuredFormatter,
    get_logger,
    set_log_level,
)


@pytest.fixture
def restore_level():
    root = logging.getLogger(ROOT_LOGGER)
    level = root.level
    yield root
    root.setLevel(level)


class TestStructuredFormatter:
    def _get_record(self, msg, exc_info=None, extra_fields=None):
        record = logging.LogRecord(
            name="sceneshare.test",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg=msg,
            args=(),
            exc_info=exc_info,
        )
        if extra_fields is not None:
            record.extra_fields = extra_fields
        return record

    def test_basic_format(self):
        record = self._get_record("link ready")
        result = json.loads(StructuredFormatter().format(record))
        assert result["message"] == "link ready"
        assert result["level"] == "INFO"
        assert result["logger"] == "sceneshare.test"
        assert result["ts"].endswith("+00:00")

    def test_timestamp_is_record_creation_time(self):
        record = self._get_record("msg")
        record.created = 0.0
        result = json.loads(StructuredFormatter().format(record))
        assert result["ts"] == "1970-01-01T00:00:00+00:00"

    def test_extra_fields_merged(self):
        record = self._get_record("msg", extra_fields={"batch_id": "abc", "total": 5})
        result = json.loads(StructuredFormatter().format(record))
        assert result["batch_id"] == "abc"
        assert result["total"] == 5

    def test_non_json_values_stringified(self):
        record = self._get_record("msg", extra_fields={"error": ValueError("bad")})
        assert json.loads(StructuredFormatter().format(record))["error"] == "bad"

    def test_non_ascii_kept_readable(self):
        line = StructuredFormatter().format(self._get_record("msg", extra_fields={"name": "写真.png"}))
        assert "写真.png" in line

    def test_exception_info_included(self):
        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()
        result = json.loads(StructuredFormatter().format(self._get_record("boom", exc_info=exc_info)))
        assert "ValueError" in result["exception"]


class TestGetLogger:
    def test_component_logger_is_namespaced(self):
        assert get_logger("upload").name == "sceneshare.upload"

    def test_single_handler_on_namespace_root(self):
        get_logger("a")
        get_logger("b")
        root = logging.getLogger(ROOT_LOGGER)
        structured = [h for h in root.handlers if isinstance(h.formatter, StructuredFormatter)]
        assert len(structured) == 1
        assert root.propagate is False
        assert get_logger("a").handlers == []

    def test_records_reach_the_structured_handler(self):
        root = logging.getLogger(ROOT_LOGGER)
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(StructuredFormatter())
        root.addHandler(handler)
        try:
            get_logger("test").warning("upload failed", extra={"extra_fields": {"index": 2}})
        finally:
            root.removeHandler(handler)

        line = json.loads(stream.getvalue().strip())
        assert line["logger"] == "sceneshare.test"
        assert line["index"] == 2


class TestSetLogLevel:
    @pytest.mark.parametrize("level, expected", [("debug", logging.DEBUG), ("WARNING", logging.WARNING), (logging.ERROR, logging.ERROR)])
    def test_levels(self, restore_level, level, expected):
        set_log_level(level)
        assert restore_level.level == expected
        assert get_logger("pipeline").getEffectiveLevel() == expected

    def test_unknown_level(self, restore_level):
        with pytest.raises(ValueError):
            set_log_level("chatty")

    def test_client_applies_config_level(self, restore_level):
        from sceneshare import AsyncSceneShareClient

        AsyncSceneShareClient(cloud_name="demo", upload_preset="unsigned_tree", log_level="error")
        assert restore_level.level == logging.ERROR
