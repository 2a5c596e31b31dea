from __future__ import annotations

import shutil
import tempfile
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import logging

    from sonarpack.build.jdk import Jdk
    from sonarpack.core._types import StrPath

MANIFEST_PATH = "META-INF/MANIFEST.MF"
_MANIFEST_VERSION = "Manifest-Version"
_MAX_LINE_BYTES = 72


def wrap_manifest_line(line: str) -> list[str]:
    """Split *line* into 72-byte manifest lines.

    Continuation lines start with a single space.  Multi-byte characters
    are never split.
    """
    lines: list[str] = []
    current = ""
    for ch in line:
        if len((current + ch).encode("utf-8")) > _MAX_LINE_BYTES:
            lines.append(current)
            current = " " + ch
        else:
            current += ch
    lines.append(current)
    return lines


def render_manifest(properties: dict[str, str]) -> str:
    entries = {_MANIFEST_VERSION: properties.get(_MANIFEST_VERSION, "1.0")}
    entries.update((k, v) for k, v in properties.items() if k != _MANIFEST_VERSION)
    lines: list[str] = []
    for name, value in entries.items():
        lines.extend(wrap_manifest_line(f"{name}: {value}"))
    # The manifest must end with a newline or the last entry is dropped.
    return "\n".join(lines) + "\n\n"


def check_manifest_entry(name: str, value: str) -> None:
    """Raise ``ValueError`` unless *name* and *value* fit on a manifest line.

    A line break in either would start a new header.
    """
    if not name or not name.strip():
        msg = "Manifest property name must not be blank"
        raise ValueError(msg)
    if ":" in name or any(ch.isspace() for ch in name):
        msg = f"Manifest property name must not contain a colon or whitespace: {name!r}"
        raise ValueError(msg)
    if "\r" in value or "\n" in value:
        msg = f"Manifest property {name!r} must not contain a line break"
        raise ValueError(msg)


def _normalize_jar_path(relative_path: str) -> str:
    path = PurePosixPath(relative_path.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts or path == PurePosixPath("."):
        msg = f"Jar path must be relative and inside the jar: {relative_path!r}"
        raise ValueError(msg)
    return str(path)


class JarBuilder:
    """Stage files and manifest entries, then archive them with ``jar``."""

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter, jdk: Jdk) -> None:
        if logger is None:
            msg = "logger must not be None"
            raise ValueError(msg)
        if jdk is None:
            msg = "jdk must not be None"
            raise ValueError(msg)
        self.logger = logger
        self.jdk = jdk
        self.manifest: dict[str, str] = {}
        self.files: dict[str, Path] = {}

    def set_manifest_property(self, name: str, value: str) -> JarBuilder:
        check_manifest_entry(name, value)
        self.manifest[name] = value
        return self

    def add_file(self, path: StrPath, relative_path: str) -> JarBuilder:
        """Add *path* to the jar at *relative_path*.  Later additions win."""
        if not relative_path or not relative_path.strip():
            msg = "Relative jar path must not be blank"
            raise ValueError(msg)
        self.files[_normalize_jar_path(relative_path)] = Path(path)
        return self

    def build(self, output_path: StrPath) -> bool:
        """Write the jar to *output_path*.  Returns ``True`` on success."""
        missing = [str(src) for src in self.files.values() if not src.is_file()]
        if missing:
            for src in missing:
                self.logger.error("File to add to the jar does not exist: %s", src)
            return False

        output = Path(output_path).resolve()
        output.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(prefix="sonarpack-jar-") as tmp:
            staging = Path(tmp) / "content"
            staging.mkdir()
            for relative, src in self.files.items():
                dest = staging / relative
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src, dest)

            manifest_file = Path(tmp) / "MANIFEST.MF"
            manifest_file.write_text(render_manifest(self.manifest), encoding="utf-8")

            args = ["cfm", str(output), str(manifest_file), "-C", str(staging), "."]
            self.logger.info("Building jar %s (%d file(s))", output, len(self.files))
            exit_code = self.jdk.build_jar(args, tmp, self.logger)

        if exit_code != 0:
            self.logger.error("jar exited with code %d", exit_code)
            return False
        self.logger.info("Created jar %s", output)
        return True
