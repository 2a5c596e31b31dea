from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

from sonarpack.build.plugin import DEFAULT_RUNTIME_JARS, SONARQUBE_API_VERSION
from sonarpack.core._types import Cardinality, RuleStatus
from sonarpack.core.config import ConfigError, SonarpackConfig, _parse_config, load_config

# Defaults


def test_config_defaults() -> None:
    cfg = SonarpackConfig()
    assert cfg.cardinality == Cardinality.SINGLE
    assert cfg.status == RuleStatus.READY
    assert cfg.api_version == SONARQUBE_API_VERSION
    assert cfg.runtime_jars == frozenset(DEFAULT_RUNTIME_JARS)
    assert cfg.support_jars == ()
    assert cfg.java_home is None
    assert dict(cfg.properties) == {}
    assert cfg.rules_resource_path == "resources/rules.xml"


def test_empty_dict_gives_defaults() -> None:
    assert _parse_config({}) == SonarpackConfig()


# _parse_config


def test_parse_enums_case_insensitive() -> None:
    cfg = _parse_config({"cardinality": "multiple", "status": "Beta"})
    assert cfg.cardinality == Cardinality.MULTIPLE
    assert cfg.status == RuleStatus.BETA


def test_parse_invalid_status() -> None:
    with pytest.raises(ConfigError):
        _parse_config({"status": "shipped"})


def test_parse_runtime_jars() -> None:
    cfg = _parse_config({"runtime_jars": ["a.jar", "b.jar"]})
    assert cfg.runtime_jars == frozenset({"a.jar", "b.jar"})


def test_parse_runtime_jars_not_a_list() -> None:
    with pytest.raises(ConfigError, match="must be a list"):
        _parse_config({"runtime_jars": "a.jar"})


def test_parse_properties() -> None:
    cfg = _parse_config({"properties": {"Plugin-Key": "example", "Plugin-Order": 3}})
    assert dict(cfg.properties) == {"Plugin-Key": "example", "Plugin-Order": "3"}


def test_parse_properties_not_a_table() -> None:
    with pytest.raises(ConfigError, match="must be a table"):
        _parse_config({"properties": ["x"]})


@pytest.mark.parametrize(
    "props",
    [{"Plugin-Name": "x\nPlugin-Class: evil.Hijack"}, {"Plugin Name": "x"}],
)
def test_parse_properties_rejects_bad_manifest_entries(props: dict[str, str]) -> None:
    with pytest.raises(ConfigError, match="Manifest property"):
        _parse_config({"properties": props})


def test_config_is_a_configuration_error() -> None:
    assert issubclass(ConfigError, ValueError)


# load_config


def test_load_from_sonarpack_toml(tmp_path: Path) -> None:
    f = tmp_path / ".sonarpack.toml"
    f.write_text(
        'api_version = "5.6"\n'
        'support_jars = ["lib/api.jar"]\n'
        "[properties]\n"
        'Plugin-Key = "example"\n'
    )
    cfg = load_config(f)
    assert cfg.api_version == "5.6"
    assert cfg.support_jars == (tmp_path / "lib" / "api.jar",)
    assert cfg.properties["Plugin-Key"] == "example"


def test_load_from_pyproject(tmp_path: Path) -> None:
    f = tmp_path / "pyproject.toml"
    f.write_text('[tool.sonarpack]\nstatus = "DEPRECATED"\n')
    assert load_config(f).status == RuleStatus.DEPRECATED


def test_load_pyproject_without_section(tmp_path: Path) -> None:
    f = tmp_path / "pyproject.toml"
    f.write_text('[tool.other]\nkey = "value"\n')
    assert load_config(f) == SonarpackConfig()


def test_load_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path / "nope.toml") == SonarpackConfig()


def test_load_invalid_toml(tmp_path: Path) -> None:
    f = tmp_path / ".sonarpack.toml"
    f.write_text("this is = = not toml")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(f)


def test_auto_detect_walks_up(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".sonarpack.toml").write_text('cardinality = "MULTIPLE"\n')
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)
    assert load_config().cardinality == Cardinality.MULTIPLE


def test_auto_detect_stops_at_pyproject(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".sonarpack.toml").write_text('cardinality = "MULTIPLE"\n')
    project = tmp_path / "project"
    project.mkdir()
    (project / "pyproject.toml").write_text("[project]\nname = 'x'\n")
    monkeypatch.chdir(project)
    assert load_config().cardinality == Cardinality.SINGLE
