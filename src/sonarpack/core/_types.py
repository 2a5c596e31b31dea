from enum import StrEnum
from os import PathLike
from typing import TypeAlias

StrPath: TypeAlias = str | PathLike[str]


class DiagnosticSeverity(StrEnum):
    """Default severity an analyzer declares for a diagnostic."""

    HIDDEN = "hidden"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class SonarSeverity(StrEnum):
    """Rule severities understood by the SonarQube server."""

    INFO = "INFO"
    MINOR = "MINOR"
    MAJOR = "MAJOR"
    CRITICAL = "CRITICAL"
    BLOCKER = "BLOCKER"


class Cardinality(StrEnum):
    SINGLE = "SINGLE"
    MULTIPLE = "MULTIPLE"


class RuleStatus(StrEnum):
    BETA = "BETA"
    DEPRECATED = "DEPRECATED"
    READY = "READY"


SONAR_SEVERITY: dict[DiagnosticSeverity, SonarSeverity] = {
    DiagnosticSeverity.ERROR: SonarSeverity.CRITICAL,
    DiagnosticSeverity.WARNING: SonarSeverity.MAJOR,
    DiagnosticSeverity.INFO: SonarSeverity.MINOR,
    DiagnosticSeverity.HIDDEN: SonarSeverity.INFO,
}
