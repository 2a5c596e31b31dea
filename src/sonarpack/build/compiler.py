from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import logging

    from sonarpack.build.jdk import Jdk
    from sonarpack.core._types import StrPath


class JavaCompilationBuilder:
    """Collect class path entries and sources, then run ``javac`` once."""

    def __init__(self, jdk: Jdk) -> None:
        if jdk is None:
            msg = "jdk must not be None"
            raise ValueError(msg)
        self.jdk = jdk
        self.class_path: list[str] = []
        self.sources: list[str] = []

    def add_class_path(self, path: StrPath) -> JavaCompilationBuilder:
        entry = str(path)
        if entry not in self.class_path:
            self.class_path.append(entry)
        return self

    def add_sources(self, *paths: StrPath) -> JavaCompilationBuilder:
        for path in paths:
            entry = str(path)
            if entry not in self.sources:
                self.sources.append(entry)
        return self

    def arguments(self, output_dir: StrPath) -> list[str]:
        args = ["-d", str(output_dir)]
        if self.class_path:
            args += ["-cp", os.pathsep.join(self.class_path)]
        args += self.sources
        return args

    def compile(
        self,
        sources_dir: StrPath,
        output_dir: StrPath,
        logger: logging.Logger | logging.LoggerAdapter,
    ) -> bool:
        """Compile the collected sources into *output_dir*.

        Returns ``True`` when ``javac`` exits with code 0.
        """
        if not self.sources:
            logger.error("No Java source files to compile")
            return False

        Path(output_dir).mkdir(parents=True, exist_ok=True)
        logger.info("Compiling %d Java source file(s)", len(self.sources))
        exit_code = self.jdk.compile_java(self.arguments(output_dir), sources_dir, logger)
        if exit_code != 0:
            logger.error("javac exited with code %d", exit_code)
        return exit_code == 0
