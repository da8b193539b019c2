"""Shared test fixtures for the optiontree test suite."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest

from optiontree.config import Config, OptionStore
from sample_data import SAMPLE_JSON, SAMPLE_OPTIONS, ChangeRecorder


@pytest.fixture
def fixtures_dir() -> Path:
    """Returns the absolute path to the tests/fixtures/ directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_options() -> dict[str, Any]:
    """A fresh copy of the nested sample option tree."""
    return copy.deepcopy(SAMPLE_OPTIONS)


@pytest.fixture
def sample_json() -> str:
    """The sample option tree as JSON text."""
    return SAMPLE_JSON


@pytest.fixture
def json_file(fixtures_dir: Path) -> Path:
    return fixtures_dir / "ConfigData.json"


@pytest.fixture
def cascading_json_file(fixtures_dir: Path) -> Path:
    return fixtures_dir / "ConfigDataCascading.json"


@pytest.fixture
def yaml_file(fixtures_dir: Path) -> Path:
    return fixtures_dir / "ConfigData.yaml"


@pytest.fixture
def python_file(fixtures_dir: Path) -> Path:
    return fixtures_dir / "ConfigData.py"


@pytest.fixture
def manifest_file(fixtures_dir: Path) -> Path:
    return fixtures_dir / "keys.manifest.yaml"


@pytest.fixture
def store(sample_options: dict[str, Any]) -> OptionStore:
    """OptionStore pre-loaded with the sample tree."""
    return OptionStore(sample_options)


@pytest.fixture
def empty_store() -> OptionStore:
    return OptionStore()


@pytest.fixture
def recorder() -> ChangeRecorder:
    return ChangeRecorder()


@pytest.fixture(params=["mapping", "json-string", "json-file", "yaml-file", "python-file"])
def any_source(request: Any, fixtures_dir: Path) -> Any:
    """Each supported source format carrying the same sample tree."""
    return {
        "mapping": SAMPLE_OPTIONS,
        "json-string": SAMPLE_JSON,
        "json-file": str(fixtures_dir / "ConfigData.json"),
        "yaml-file": str(fixtures_dir / "ConfigData.yaml"),
        "python-file": str(fixtures_dir / "ConfigData.py"),
    }[request.param]


@pytest.fixture
def config(any_source: Any) -> Config:
    """Config loaded from each supported source format in turn."""
    return Config(any_source)
