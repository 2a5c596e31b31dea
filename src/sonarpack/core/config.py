from __future__ import annotations

import dataclasses
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sonarpack.build.jar import check_manifest_entry
from sonarpack.build.plugin import DEFAULT_RUNTIME_JARS, SONARQUBE_API_VERSION
from sonarpack.core._types import Cardinality, RuleStatus
from sonarpack.core.errors import ConfigError

__all__ = ["ConfigError", "SonarpackConfig", "load_config"]


@dataclass(frozen=True)
class SonarpackConfig:
    """Configuration for rule generation and plugin builds.

    Can be loaded from ``.sonarpack.toml`` or ``pyproject.toml [tool.sonarpack]``
    via :func:`load_config`.

    Example ``pyproject.toml``::

        [tool.sonarpack]
        api_version = "4.5.2"
        status = "BETA"
        runtime_jars = ["sonar-plugin-api-4.5.2.jar", "slf4j-api-1.7.5.jar"]
        support_jars = ["lib/sonar-plugin-api-4.5.2.jar"]

        [tool.sonarpack.properties]
        Plugin-Key = "example"
        Plugin-Class = "org.example.ExamplePlugin"

    """

    # --- Rule generation ---

    cardinality: Cardinality = Cardinality.SINGLE
    """Cardinality written for every generated rule."""

    status: RuleStatus = RuleStatus.READY
    """Status written for every generated rule."""

    # --- Plugin build ---

    api_version: str = SONARQUBE_API_VERSION
    """Value of the ``Sonar-Version`` manifest entry."""

    runtime_jars: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_RUNTIME_JARS))
    """Jar file names the server provides at runtime.  Referenced jars whose
    path ends with one of these are not embedded in the plugin."""

    support_jars: tuple[Path, ...] = ()
    """Jars copied into each build and put on the compile class path."""

    java_home: str | None = None
    """JDK location.  ``None`` means ``$JAVA_HOME`` or ``javac`` on ``PATH``."""

    properties: dict[str, str] = field(default_factory=dict)
    """Extra manifest entries.  These override the built-in ones."""

    rules_resource_path: str = "resources/rules.xml"
    """Location of the generated rules document inside the plugin jar."""


def load_config(path: Path | str | None = None) -> SonarpackConfig:
    """Load :class:`SonarpackConfig` from a TOML file.

    When ``path`` is ``None``, walks up from the current directory looking for
    ``.sonarpack.toml`` first, then ``pyproject.toml [tool.sonarpack]``.  A
    ``pyproject.toml`` without a ``[tool.sonarpack]`` section acts as a project
    root marker and stops the search.

    Relative ``support_jars`` paths are resolved against the config file's
    directory.

    Raises:
        :class:`ConfigError`: If the file is not valid TOML or contains an
            unrecognised value.

    """
    if path is not None:
        resolved = Path(path)
        if not resolved.exists():
            return _parse_config({})
        return _parse_config(_read_file(resolved), base_dir=resolved.parent)

    found = _find_config()
    if found is None:
        return _parse_config({})
    return _parse_config(_read_file(found), base_dir=found.parent)


def _find_config() -> Path | None:
    """Walk up from CWD looking for a config file."""
    current = Path.cwd()
    while True:
        sonarpack_toml = current / ".sonarpack.toml"
        if sonarpack_toml.exists():
            return sonarpack_toml

        pyproject = current / "pyproject.toml"
        if pyproject.exists():
            # pyproject.toml marks the project root
            return pyproject

        parent = current.parent
        if parent == current:  # reached filesystem root
            return None
        current = parent


def _read_file(path: Path) -> dict[str, Any]:
    """Read a TOML file and return the sonarpack-relevant section."""
    try:
        with path.open("rb") as f:
            raw: dict[str, Any] = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    if path.name == "pyproject.toml":
        tool: dict[str, Any] = raw.get("tool", {})
        section: dict[str, Any] = tool.get("sonarpack", {})
        return section
    return raw


def _str_list(data: dict[str, Any], key: str) -> list[str] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigError(f"{key!r} must be a list, got {type(value).__name__}")
    return [str(v) for v in value]


def _parse_config(data: dict[str, Any], *, base_dir: Path | None = None) -> SonarpackConfig:
    """Parse raw key/value dict into :class:`SonarpackConfig`.

    Raises:
        :class:`ConfigError`: On unrecognised enum values or wrongly typed keys.

    """
    kwargs: dict[str, Any] = {}
    try:
        if (v := data.get("cardinality")) is not None:
            kwargs["cardinality"] = Cardinality(str(v).upper())
        if (v := data.get("status")) is not None:
            kwargs["status"] = RuleStatus(str(v).upper())
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    if (v := data.get("api_version")) is not None:
        kwargs["api_version"] = str(v)
    if (v := data.get("java_home")) is not None:
        kwargs["java_home"] = str(v)
    if (v := data.get("rules_resource_path")) is not None:
        kwargs["rules_resource_path"] = str(v)

    if (jars := _str_list(data, "runtime_jars")) is not None:
        kwargs["runtime_jars"] = frozenset(jars)
    if (jars := _str_list(data, "support_jars")) is not None:
        root = base_dir or Path.cwd()
        kwargs["support_jars"] = tuple(root / j for j in jars)

    if (props := data.get("properties")) is not None:
        if not isinstance(props, dict):
            raise ConfigError(f"'properties' must be a table, got {type(props).__name__}")
        properties = {str(k): str(v) for k, v in props.items()}
        try:
            for name, value in properties.items():
                check_manifest_entry(name, value)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        kwargs["properties"] = properties

    return dataclasses.replace(SonarpackConfig(), **kwargs)
