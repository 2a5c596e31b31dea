from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sonarpack.core._types import DiagnosticSeverity

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


@dataclass(frozen=True, slots=True)
class DiagnosticDescriptor:
    """Metadata describing a single diagnostic an analyzer can report.

    ``title`` and ``description`` are stringified on use, so localizable
    string objects can be passed as-is.

    Example::

        CA_1001 = DiagnosticDescriptor(
            id="CA1001",
            title="Types that own disposable fields should be disposable",
            description="A class declares and implements an IDisposable field...",
            help_link_uri="https://example.org/CA1001",
            default_severity=DiagnosticSeverity.WARNING,
            tags=("design",),
        )
    """

    id: str
    title: object = ""
    description: object | None = None
    help_link_uri: str | None = None
    default_severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    tags: tuple[str, ...] = ()
    category: str = ""
    enabled_by_default: bool = True

    def __str__(self) -> str:
        return f"[{self.id}] {self.title}"


@runtime_checkable
class Analyzer(Protocol):
    """Anything that can tell which diagnostics it supports."""

    def supported_diagnostics(self) -> Sequence[DiagnosticDescriptor]: ...


@dataclass
class ConfigurableAnalyzer:
    """Analyzer whose diagnostics are registered at runtime.

    Useful for describing third-party analyzers in plain Python, and in tests.
    """

    name: str = "ConfigurableAnalyzer"
    diagnostics: list[DiagnosticDescriptor] = field(default_factory=list)

    def register_diagnostic(
        self,
        key: str,
        *,
        title: object | None = None,
        description: object | None = None,
        help_link_uri: str | None = None,
        default_severity: DiagnosticSeverity = DiagnosticSeverity.WARNING,
        tags: Iterable[str] = (),
        category: str = "",
    ) -> DiagnosticDescriptor:
        descriptor = DiagnosticDescriptor(
            id=key,
            title=key if title is None else title,
            description=description,
            help_link_uri=help_link_uri,
            default_severity=default_severity,
            tags=tuple(tags),
            category=category,
        )
        self.diagnostics.append(descriptor)
        return descriptor

    def supported_diagnostics(self) -> Sequence[DiagnosticDescriptor]:
        return tuple(self.diagnostics)
