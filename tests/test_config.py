"""Tests for Config: loading sources, item access and serialization."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from optiontree.config import Config, OptionStore
from optiontree.errors import (
    FileUnreadableError,
    JsonSyntaxError,
    OptionAlreadySetError,
    OptionNotAllowedError,
    OptionNotFoundError,
    UnsupportedFileTypeError,
)
from optiontree.loader import ConfigLoader
from sample_data import SAMPLE_JSON, SAMPLE_OPTIONS


class TestLoadFormats:
    """Every source format yields the same tree (config is parametrized)."""

    def test_is_an_option_store(self, config) -> None:
        assert isinstance(config, OptionStore)

    def test_top_level_count(self, config) -> None:
        assert len(config.get_options()) == 3

    def test_tree_equals_sample(self, config) -> None:
        assert config.get_options() == SAMPLE_OPTIONS

    def test_get_option(self, config) -> None:
        assert config.get_option("key-1") == "value-1"
        assert config["key-1"] == "value-1"
        assert config.get_option("key-2.key-2-1") == "value-2-1"
        assert config.get("key-2.key-2-1") == "value-2-1"
        assert config["key-2.key-2-1"] == "value-2-1"

    def test_defaults_and_presence(self, config) -> None:
        assert config.get_option("none.existing.key.with.default.value", "default.value") == "default.value"
        assert config["key-3"] == {}
        assert config.has_option("key-3") is True
        assert config.has_option("key-4") is False

    def test_set_option(self, config) -> None:
        config.set_option("key-1", "bogus", True)
        assert config.get_option("key-1") == "bogus"
        assert config["key-1"] == "bogus"
        with pytest.raises(OptionAlreadySetError):
            config.set_option("key-1", "bogus again")
        with pytest.raises(OptionAlreadySetError):
            config["key-1"] = "bogus again"


class TestRoundTrip:
    def test_literal_json_text_and_file_agree(self, tmp_path: Path) -> None:
        tree = {"server": {"host": "example.org", "ports": [80, 443]}, "debug": False}
        json_path = tmp_path / "round.json"
        json_path.write_text(json.dumps(tree))

        from_literal = Config(tree)
        from_text = Config(json.dumps(tree))
        from_file = Config(str(json_path))

        assert from_literal.get_options() == from_text.get_options() == from_file.get_options()


class TestLoadFailures:
    def test_missing_file_is_parsed_as_json(self) -> None:
        with pytest.raises(JsonSyntaxError) as exc_info:
            Config("not existing file")
        assert "Syntax error, malformed JSON" in exc_info.value.message

    def test_malformed_json_never_yields_empty_tree(self) -> None:
        with pytest.raises(JsonSyntaxError):
            Config('{"key-1": "value-1",}')

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        ini = tmp_path / "settings.ini"
        ini.write_text("[section]\nkey=value\n")
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            Config(str(ini))
        assert exc_info.value.extension == "ini"

    def test_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileUnreadableError):
            Config(str(tmp_path))

    def test_failed_load_leaves_state_unchanged(self, json_file: Path) -> None:
        cfg = Config(str(json_file))
        with pytest.raises(JsonSyntaxError):
            cfg.set_options("{broken")
        assert cfg.get_options() == SAMPLE_OPTIONS
        assert cfg.file == str(json_file)


class TestFile:
    def test_file_recorded_for_path_string(self, json_file: Path) -> None:
        assert Config(str(json_file)).file == str(json_file)

    def test_file_recorded_for_path_object(self, yaml_file: Path) -> None:
        assert Config(yaml_file).file == str(yaml_file)

    def test_no_file_for_mapping_or_text(self) -> None:
        assert Config(SAMPLE_OPTIONS).file is None
        assert Config(SAMPLE_JSON).file is None
        assert Config().file is None

    def test_custom_loader(self, json_file: Path) -> None:
        loader = ConfigLoader()
        Config(str(json_file), loader=loader)
        assert loader.last_file == str(json_file)


class TestCascading:
    """Layering one configuration over another with set_options()."""

    def test_cascade_replaces_matching_top_level_keys(
        self, json_file: Path, cascading_json_file: Path
    ) -> None:
        conf_a = Config(str(json_file))
        conf_b = Config(str(cascading_json_file))
        assert conf_a["key-2.key-2-2.key-2-2-1"] == "value-2-2-1"

        conf_a.set_options(conf_b.get_options())
        assert conf_a["key-4"] == "new value"
        assert conf_a["key-3"] == {}
        assert conf_a["key-2.key-2-2.key-2-2-1"] == "value-2-2-1-cascading"

    def test_cascade_from_file_path(self, json_file: Path, cascading_json_file: Path) -> None:
        cfg = Config(str(json_file))
        cfg.set_options(str(cascading_json_file))
        assert cfg["key-4"] == "new value"
        assert cfg["key-1"] == "value-1"
        assert cfg.file == str(cascading_json_file)

    def test_cascade_rejected_by_whitelist(self, json_file: Path, cascading_json_file: Path) -> None:
        cfg = Config(
            allowed_options=[
                "key-1",
                "key-2",
                "key-2.key-2-1",
                "key-2.key-2-2",
                "key-2.key-2-2.key-2-2-1",
                "key-3",
            ]
        )
        cfg.set_options(str(json_file))
        with pytest.raises(OptionNotAllowedError) as exc_info:
            cfg.set_options(Config(str(cascading_json_file)).get_options())
        assert exc_info.value.key == "key-4"
        assert cfg["key-2.key-2-2.key-2-2-1"] == "value-2-2-1"


class TestItemAccess:
    def test_setitem_creates_nested(self) -> None:
        cfg = Config()
        cfg["a.b.c"] = 1
        assert cfg.get_options() == {"a": {"b": {"c": 1}}}

    def test_getitem_missing_raises(self) -> None:
        with pytest.raises(OptionNotFoundError):
            Config()["missing"]

    def test_contains(self, json_file: Path) -> None:
        cfg = Config(str(json_file))
        assert "key-2.key-2-1" in cfg
        assert "key-2.nope" not in cfg
        assert 42 not in cfg

    def test_delitem(self, json_file: Path) -> None:
        cfg = Config(str(json_file))
        del cfg["key-2.key-2-1"]
        assert "key-2.key-2-1" not in cfg
        assert "key-2.key-2-2" in cfg


class TestSerialization:
    def test_to_json(self, json_file: Path) -> None:
        cfg = Config(str(json_file))
        assert json.loads(cfg.to_json()) == SAMPLE_OPTIONS

    def test_to_json_indent(self) -> None:
        assert Config({"a": 1}).to_json(indent=2) == '{\n  "a": 1\n}'
