"""
Tests for the coded exception hierarchy.
"""

from pathlib import Path

import pytest
from loguru import logger

from dreaddloader.exceptions import (
    ConfigError,
    DreaddLoaderError,
    LoadError,
    SchemaError,
    log_and_raise,
)


class TestHierarchy:

    @pytest.mark.parametrize("error_class, default_code", [
        (DreaddLoaderError, "DREADD_001"),
        (ConfigError, "CONFIG_001"),
        (LoadError, "LOAD_001"),
        (SchemaError, "SCHEMA_001"),
    ])
    def test_default_codes(self, error_class, default_code):
        error = error_class("failure")

        assert error.error_code == default_code
        assert isinstance(error, DreaddLoaderError)
        assert isinstance(error, Exception)

    def test_catching_the_base_class(self):
        with pytest.raises(DreaddLoaderError):
            raise SchemaError("bad dose", "SCHEMA_003")


class TestContext:

    def test_paths_are_stored_as_text(self):
        load_error = LoadError("missing", "LOAD_001", {"file_path": Path("/data/results.csv")})
        config_error = ConfigError("missing", "CONFIG_001", {"config_path": Path("/etc/pipeline.yaml")})

        assert load_error.context["file_path"] == str(Path("/data/results.csv"))
        assert config_error.context["config_path"] == str(Path("/etc/pipeline.yaml"))

    def test_context_is_copied(self):
        context = {"row_index": 3}

        error = SchemaError("bad", "SCHEMA_003", context)
        error.context["raw_value"] = "abc"

        assert context == {"row_index": 3}

    def test_schema_error_accessors(self):
        error = SchemaError(
            "bad dose",
            "SCHEMA_003",
            {"row_index": 4, "column": "Dose", "raw_value": "abc", "missing_columns": ("Dose",)},
        )

        assert error.row_index == 4
        assert error.raw_value == "abc"
        assert error.context["missing_columns"] == ["Dose"]

    def test_accessors_default_to_none(self):
        error = SchemaError("bad header")

        assert error.row_index is None
        assert error.raw_value is None

    def test_source_function_is_recorded(self):
        def raising_function():
            raise DreaddLoaderError("boom")

        with pytest.raises(DreaddLoaderError) as exc_info:
            raising_function()

        assert exc_info.value.context["source_function"] == "raising_function"

    def test_source_function_skips_subclass_constructors(self):
        def load_results():
            raise LoadError("gone")

        with pytest.raises(LoadError) as exc_info:
            load_results()

        assert exc_info.value.context["source_function"] == "load_results"

    def test_with_context_chains(self):
        error = LoadError("unreadable").with_context({"delimiter": ";"})

        assert isinstance(error, LoadError)
        assert error.context["delimiter"] == ";"


class TestRendering:

    def test_str_includes_code_and_context(self):
        error = SchemaError("Unknown compound", "SCHEMA_002", {"row_index": 12, "raw_value": "j99ws"})

        text = str(error)

        assert text.startswith("Unknown compound [Error Code: SCHEMA_002, Context: ")
        assert "row_index=12" in text
        assert "raw_value=j99ws" in text

    def test_message_is_undecorated(self):
        assert ConfigError("bad yaml", "CONFIG_002").message == "bad yaml"

    def test_repr(self):
        assert repr(LoadError("gone", "LOAD_001")).startswith("LoadError(message='gone', error_code='LOAD_001'")


class TestLogAndRaise:

    def test_logs_message_and_context_then_raises(self, caplog):
        error = SchemaError("Invalid dose", "SCHEMA_003", {"row_index": 2, "raw_value": "abc"})

        with pytest.raises(SchemaError) as exc_info:
            log_and_raise(error, logger)

        assert exc_info.value is error
        assert "SchemaError: Invalid dose" in caplog.text
        assert "raw_value: abc" in caplog.text

    def test_without_logger(self):
        with pytest.raises(LoadError):
            log_and_raise(LoadError("gone"))

    def test_warning_level(self, caplog):
        with pytest.raises(ConfigError):
            log_and_raise(ConfigError("odd config"), logger, level="warning")

        assert any(record.levelname == "WARNING" for record in caplog.records)
