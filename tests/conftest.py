from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from sonarpack.core.descriptor import ConfigurableAnalyzer
from sonarpack.core.rule import Rule, RuleSet

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sonarpack.core._types import StrPath

TEST_LOGGER = logging.getLogger("tests.sonarpack")

DEFAULT_CLASSES: tuple[str, ...] = (
    "org/example/ExamplePlugin.class",
    "org/example/rules/ExampleRules.class",
)


@dataclass
class JarCall:
    args: list[str]
    output: Path
    manifest: str
    entries: dict[str, bytes]


@dataclass
class FakeJdk:
    """In-process stand-in for :class:`~sonarpack.build.jdk.JdkWrapper`.

    ``compile_java`` writes empty class files into the ``-d`` directory;
    ``build_jar`` snapshots the staged files and manifest, then writes a
    placeholder jar.
    """

    installed: bool = True
    compile_exit_code: int = 0
    jar_exit_code: int = 0
    classes: tuple[str, ...] = DEFAULT_CLASSES
    compile_calls: list[list[str]] = field(default_factory=list)
    jar_calls: list[JarCall] = field(default_factory=list)

    def is_jdk_installed(self) -> bool:
        return self.installed

    def compile_java(self, args: Sequence[str], cwd: StrPath, log: logging.Logger) -> int:
        self.compile_calls.append(list(args))
        if self.compile_exit_code == 0:
            out_dir = Path(args[args.index("-d") + 1])
            for cls in self.classes:
                target = out_dir / cls
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(b"\xca\xfe\xba\xbe")
        return self.compile_exit_code

    def build_jar(self, args: Sequence[str], cwd: StrPath, log: logging.Logger) -> int:
        output, manifest, staging = Path(args[1]), Path(args[2]), Path(args[4])
        entries = {
            p.relative_to(staging).as_posix(): p.read_bytes()
            for p in sorted(staging.rglob("*"))
            if p.is_file()
        }
        self.jar_calls.append(
            JarCall(
                args=list(args),
                output=output,
                manifest=manifest.read_text(encoding="utf-8"),
                entries=entries,
            )
        )
        if self.jar_exit_code == 0:
            output.write_bytes(b"PK\x05\x06" + b"\x00" * 18)
        return self.jar_exit_code

    @property
    def last_jar(self) -> JarCall:
        assert self.jar_calls, "jar was never invoked"
        return self.jar_calls[-1]


def parse_manifest(text: str) -> dict[str, str]:
    """Parse manifest text, joining continuation lines."""
    entries: dict[str, str] = {}
    last = ""
    for line in text.splitlines():
        if not line:
            continue
        if line.startswith(" "):
            entries[last] += line[1:]
            continue
        name, _, value = line.partition(": ")
        entries[name] = value
        last = name
    return entries


def make_analyzer(*entries: dict[str, object]) -> ConfigurableAnalyzer:
    analyzer = ConfigurableAnalyzer()
    for entry in entries:
        kwargs = dict(entry)
        key = str(kwargs.pop("key"))
        analyzer.register_diagnostic(key, **kwargs)  # type: ignore[arg-type]
    return analyzer


def assert_rule_valid(rule: Rule) -> None:
    """Check the rule would be accepted by SonarQube when rendered as XML."""
    assert rule.key
    assert rule.description.strip()
    if rule.tags is not None:
        for tag in rule.tags:
            assert tag == tag.lower(), f"Tag {tag!r} is not lower-case"


def rule_by_key(rules: RuleSet, key: str) -> Rule:
    matching = [r for r in rules if r.key == key]
    assert len(matching) == 1, f"Expected one rule {key}, got: {[r.key for r in rules]}"
    return matching[0]
