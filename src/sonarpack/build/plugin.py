"""Compile plugin sources and package them into a SonarQube plugin jar."""

from __future__ import annotations

import os
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from sonarpack.build.compiler import JavaCompilationBuilder
from sonarpack.build.jar import JarBuilder, check_manifest_entry
from sonarpack.build.jdk import JdkWrapper
from sonarpack.core.errors import CompilerError, JdkNotFoundError

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable

    from sonarpack.build.jdk import Jdk
    from sonarpack.core._types import StrPath

SONARQUBE_API_VERSION = "4.5.2"
SONAR_VERSION_PROPERTY = "Sonar-Version"
PLUGIN_DEPENDENCIES_PROPERTY = "Plugin-Dependencies"
EMBEDDED_LIB_PREFIX = "META-INF/lib/"

# Jars the SonarQube server already provides; never embedded in the plugin.
DEFAULT_RUNTIME_JARS: tuple[str, ...] = (
    "sonar-plugin-api-4.5.2.jar",
    "slf4j-api-1.7.5.jar",  # shipped with sonar-plugin-api
)


def _require(value: object, name: str) -> str:
    text = "" if value is None else os.fspath(value)  # type: ignore[arg-type]
    if not text.strip():
        msg = f"{name} must not be blank"
        raise ValueError(msg)
    return text


def _path_key(path: str) -> str:
    return os.path.normcase(path)


class PluginBuilder:
    """Fluent builder for a SonarQube plugin jar.

    Example::

        (
            PluginBuilder(logger)
            .set_jar_file_path("out/example-plugin.jar")
            .set_property("Plugin-Key", "example")
            .add_source_file("src/ExamplePlugin.java")
            .add_resource_file("rules.xml", "resources/rules.xml")
            .build()
        )

    Each :meth:`build` call compiles into its own uniquely named working
    directory, so independent builders never interfere.
    """

    def __init__(
        self,
        logger: logging.Logger | logging.LoggerAdapter,  # type: ignore[type-arg]
        jdk: Jdk | None = None,
        *,
        api_version: str = SONARQUBE_API_VERSION,
        runtime_jars: Iterable[str] = DEFAULT_RUNTIME_JARS,
        support_jars: Iterable[StrPath] = (),
    ) -> None:
        if logger is None:
            msg = "logger must not be None"
            raise ValueError(msg)
        self.logger = logger
        self.jdk: Jdk = jdk if jdk is not None else JdkWrapper()
        self.api_version = api_version
        self.runtime_jars = frozenset(runtime_jars)
        self.support_jars = tuple(Path(p) for p in support_jars)

        self.jar_file_path: str | None = None
        self._properties: dict[str, str] = {}
        self._source_files: dict[str, str] = {}
        self._referenced_jars: dict[str, str] = {}
        self._resource_files: dict[str, str] = {}

    # --- Configuration ---

    def set_jar_file_path(self, path: StrPath) -> PluginBuilder:
        self.jar_file_path = _require(path, "jar file path")
        return self

    def set_property(self, name: str, value: str) -> PluginBuilder:
        """Set a property that will appear in the jar manifest."""
        name = _require(name, "property name")
        check_manifest_entry(name, value)
        self._properties[name] = value
        return self

    def add_source_file(self, path: StrPath) -> PluginBuilder:
        """Add a Java source file to compile into the plugin."""
        source = _require(path, "source path")
        self._source_files.setdefault(_path_key(source), source)
        return self

    def add_referenced_jar(self, path: StrPath) -> PluginBuilder:
        """Add a jar needed to compile the sources.

        Jars not provided by the server at runtime are embedded in the plugin.
        """
        jar = _require(path, "jar path")
        self._referenced_jars.setdefault(_path_key(jar), jar)
        return self

    def add_resource_file(self, path: StrPath, relative_jar_path: str) -> PluginBuilder:
        """Add *path* to the jar at *relative_jar_path*."""
        self._resource_files[_require(path, "resource path")] = _require(
            relative_jar_path, "relative jar path"
        )
        return self

    @property
    def properties(self) -> dict[str, str]:
        return dict(self._properties)

    @property
    def source_files(self) -> list[str]:
        return list(self._source_files.values())

    @property
    def referenced_jars(self) -> list[str]:
        return list(self._referenced_jars.values())

    @property
    def resource_files(self) -> dict[str, str]:
        return dict(self._resource_files)

    def is_runtime_jar(self, path: str) -> bool:
        """Return ``True`` if the server provides *path* at runtime."""
        return any(path.endswith(name) for name in self.runtime_jars)

    # --- Build ---

    def build(self) -> bool:
        """Compile the sources and build the jar.

        Raises:
            :class:`ValueError`: If no output jar path or no source file was set.
            :class:`JdkNotFoundError`: If no JDK is available.
            :class:`CompilerError`: If ``javac`` fails.  No jar is written.

        Returns ``False`` if the jar itself could not be built.
        """
        output = _require(self.jar_file_path, "jar file path")
        if not self._source_files:
            msg = "At least one source file is required to build the plugin"
            raise ValueError(msg)
        if not self.jdk.is_jdk_installed():
            msg = "A Java Development Kit (JDK) is required to build the plugin; set JAVA_HOME"
            raise JdkNotFoundError(msg)

        working_dir = Path(tempfile.gettempdir()) / "plugins" / uuid.uuid4().hex
        working_dir.mkdir(parents=True)
        self.logger.debug("Working directory: %s", working_dir)
        try:
            referenced = self.referenced_jars
            for jar in self._unpack_support_jars(working_dir):
                if str(jar) not in referenced:
                    referenced.append(str(jar))
            self._compile(working_dir, referenced)
            return self._build_jar(working_dir, output, referenced)
        finally:
            shutil.rmtree(working_dir, ignore_errors=True)

    def _unpack_support_jars(self, working_dir: Path) -> list[Path]:
        unpacked: list[Path] = []
        for src in self.support_jars:
            dest = working_dir / src.name
            shutil.copy2(src, dest)
            unpacked.append(dest)
        return unpacked

    def _compile(self, working_dir: Path, referenced: list[str]) -> None:
        compiler = JavaCompilationBuilder(self.jdk)
        for jar in referenced:
            compiler.add_class_path(jar)
        compiler.add_sources(*self.source_files)

        if not compiler.compile(working_dir, working_dir, self.logger):
            self.logger.error("Failed to compile the plugin sources")
            msg = "Java compilation failed - see the log for details"
            raise CompilerError(msg)
        self.logger.info("Plugin sources compiled successfully")

    def _build_jar(self, classes_dir: Path, output: str, referenced: list[str]) -> bool:
        jar = JarBuilder(self.logger, self.jdk)

        jar.set_manifest_property(SONAR_VERSION_PROPERTY, self.api_version)
        for name, value in self._properties.items():
            jar.set_manifest_property(name, value)

        for class_file in sorted(classes_dir.rglob("*.class")):
            jar.add_file(class_file, class_file.relative_to(classes_dir).as_posix())

        for path, relative in self._resource_files.items():
            jar.add_file(path, relative)

        embedded: list[str] = []
        for ref in referenced:
            if self.is_runtime_jar(ref):
                continue
            jar_name = EMBEDDED_LIB_PREFIX + Path(ref).name
            jar.add_file(ref, jar_name)
            embedded.append(jar_name)
        jar.set_manifest_property(PLUGIN_DEPENDENCIES_PROPERTY, " ".join(embedded))

        return jar.build(output)
