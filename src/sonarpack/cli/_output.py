from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

from sonarpack import __version__
from sonarpack.core._types import SonarSeverity

if TYPE_CHECKING:
    from sonarpack.core.rule import Rule

_SEVERITY_COLORS: dict[SonarSeverity, str] = {
    SonarSeverity.BLOCKER: "\033[1;31m",  # bold red
    SonarSeverity.CRITICAL: "\033[31m",  # red
    SonarSeverity.MAJOR: "\033[33m",  # yellow
    SonarSeverity.MINOR: "\033[36m",  # cyan
    SonarSeverity.INFO: "\033[2m",  # dim
}
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RESET = "\033[0m"

_LINE_WIDTH = 66


def _use_color(no_color_flag: bool) -> bool:
    if no_color_flag:
        return False
    return not os.environ.get("NO_COLOR", "")


def _c(text: str, code: str, *, color: bool) -> str:
    if not color:
        return text
    return f"{code}{text}{_RESET}"


def format_rules_text(rules: list[Rule], *, no_color: bool = False) -> str:
    color = _use_color(no_color)
    lines: list[str] = []
    w = lines.append

    key_w = max((len(r.key) for r in rules), default=0)
    sev_w = max((len(str(r.severity)) for r in rules), default=0)

    w(f"sonarpack {__version__} - {len(rules)} rules")
    header = "── Rules "
    w("")
    w(_c(header + "─" * max(0, _LINE_WIDTH - len(header)), _BOLD, color=color))
    w("")
    for r in rules:
        sev_color = _SEVERITY_COLORS.get(r.severity, "")
        key = _c(r.key.ljust(key_w), _BOLD, color=color)
        severity = _c(str(r.severity).ljust(sev_w), sev_color, color=color)
        w(f"  {key}  {severity}  {r.name}")
        if r.tags:
            w(_c(f"  {'':<{key_w}}  tags: {', '.join(r.tags)}", _DIM, color=color))

    return "\n".join(lines)


def format_rules_json(rules: list[Rule]) -> str:
    data = {
        "version": __version__,
        "rules": [
            {
                "key": r.key,
                "internal_key": r.internal_key,
                "name": r.name,
                "description": r.description,
                "severity": str(r.severity),
                "cardinality": str(r.cardinality),
                "status": str(r.status),
                "tags": list(r.tags) if r.tags is not None else None,
            }
            for r in rules
        ],
        "total": len(rules),
    }
    return json.dumps(data, indent=2)
