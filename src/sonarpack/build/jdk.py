"""Locate a JDK and run its command-line tools."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sonarpack.core._types import StrPath

logger = logging.getLogger("sonarpack")

_EXE_SUFFIX = ".exe" if sys.platform == "win32" else ""


class Jdk(Protocol):
    """What the compiler and jar wrappers need from a JDK installation."""

    def is_jdk_installed(self) -> bool: ...

    def compile_java(
        self, args: Sequence[str], cwd: StrPath, log: logging.Logger | logging.LoggerAdapter
    ) -> int: ...

    def build_jar(
        self, args: Sequence[str], cwd: StrPath, log: logging.Logger | logging.LoggerAdapter
    ) -> int: ...


def _find_java_home() -> Path | None:
    if env := os.environ.get("JAVA_HOME"):
        return Path(env)
    javac = shutil.which("javac")
    if javac is None:
        return None
    # <java_home>/bin/javac, following symlinks such as /usr/bin/javac
    return Path(javac).resolve().parent.parent


class JdkWrapper:
    """Run ``javac`` and ``jar`` from a JDK installation.

    ``java_home`` defaults to ``$JAVA_HOME``, then to the JDK that owns the
    ``javac`` found on ``PATH``.
    """

    def __init__(self, java_home: StrPath | None = None) -> None:
        self.java_home = Path(java_home) if java_home else _find_java_home()

    def _tool(self, name: str) -> Path | None:
        if self.java_home is None:
            return None
        return self.java_home / "bin" / f"{name}{_EXE_SUFFIX}"

    @property
    def javac_path(self) -> Path | None:
        return self._tool("javac")

    @property
    def jar_path(self) -> Path | None:
        return self._tool("jar")

    def is_jdk_installed(self) -> bool:
        javac, jar = self.javac_path, self.jar_path
        return javac is not None and javac.is_file() and jar is not None and jar.is_file()

    def compile_java(
        self, args: Sequence[str], cwd: StrPath, log: logging.Logger | logging.LoggerAdapter
    ) -> int:
        return self._run(self.javac_path, args, cwd, log)

    def build_jar(
        self, args: Sequence[str], cwd: StrPath, log: logging.Logger | logging.LoggerAdapter
    ) -> int:
        return self._run(self.jar_path, args, cwd, log)

    def _run(
        self,
        exe: Path | None,
        args: Sequence[str],
        cwd: StrPath,
        log: logging.Logger | logging.LoggerAdapter,
    ) -> int:
        if exe is None:
            msg = "No JDK configured - set JAVA_HOME or put javac on PATH"
            raise FileNotFoundError(msg)
        cmd = [str(exe), *args]
        log.debug("Executing: %s", subprocess.list2cmdline(cmd))
        result = subprocess.run(  # noqa: S603
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        for line in result.stdout.splitlines():
            log.info(line)
        for line in result.stderr.splitlines():
            log.warning(line)
        log.debug("%s exited with code %d", exe.name, result.returncode)
        return result.returncode
