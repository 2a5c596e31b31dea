"""Map analyzer diagnostic descriptors to SonarQube rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sonarpack.core._types import SONAR_SEVERITY, Cardinality, RuleStatus, SonarSeverity
from sonarpack.core.rule import Rule, RuleSet
from sonarpack.rules.serializer import xml_text

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable, Iterator

    from sonarpack.core.descriptor import Analyzer, DiagnosticDescriptor

NO_DESCRIPTION = "No description was supplied."
MORE_DETAILS = "For more details see: {link}"

DEFAULT_CARDINALITY = Cardinality.SINGLE
DEFAULT_STATUS = RuleStatus.READY


def _all_lower(tags: Iterable[str]) -> bool:
    return all(tag == tag.lower() for tag in tags)


def build_description(descriptor: DiagnosticDescriptor) -> str:
    """Return the plain-text rule description for *descriptor*.

    Blank descriptions fall back to :data:`NO_DESCRIPTION`.  A help link,
    if any, is appended on its own line.
    """
    raw = descriptor.description
    text = "" if raw is None else xml_text(str(raw))
    body = text if text.strip() else NO_DESCRIPTION
    link = descriptor.help_link_uri
    if link is not None and link.strip():
        body = f"{body}\n{MORE_DETAILS.format(link=xml_text(link.strip()))}"
    return body


class RuleGenerator:
    """Generate a :class:`RuleSet` from a collection of analyzers.

    ``cardinality`` and ``status`` are fixed for the lifetime of the
    generator and applied to every rule it produces.
    """

    def __init__(
        self,
        logger: logging.Logger | logging.LoggerAdapter,  # type: ignore[type-arg]
        *,
        cardinality: Cardinality = DEFAULT_CARDINALITY,
        status: RuleStatus = DEFAULT_STATUS,
    ) -> None:
        if logger is None:
            msg = "logger must not be None"
            raise ValueError(msg)
        self.logger = logger
        self.cardinality = Cardinality(cardinality)
        self.status = RuleStatus(status)

    def generate_rules(self, analyzers: Iterable[Analyzer]) -> RuleSet:
        descriptors = self._unique_descriptors(analyzers)

        # Tags are surfaced all-or-nothing: one non-lower-case tag anywhere
        # in the generation suppresses tags on every rule.
        surface_tags = all(_all_lower(d.tags) for d in descriptors)
        if not surface_tags:
            self.logger.info("Rule tags omitted: not all declared tags are lower-case")

        rules = RuleSet(self._make_rule(d, surface_tags=surface_tags) for d in descriptors)
        self.logger.info("Generated %d rule(s)", len(rules))
        return rules

    def _unique_descriptors(self, analyzers: Iterable[Analyzer]) -> list[DiagnosticDescriptor]:
        seen: dict[str, DiagnosticDescriptor] = {}
        for descriptor in _flatten(analyzers):
            if descriptor.id in seen:
                self.logger.warning(
                    "Duplicate diagnostic id %s - keeping the first definition", descriptor.id
                )
                continue
            seen[descriptor.id] = descriptor
        return list(seen.values())

    def _make_rule(self, descriptor: DiagnosticDescriptor, *, surface_tags: bool) -> Rule:
        tags = tuple(descriptor.tags) if surface_tags and descriptor.tags else None
        return Rule(
            key=descriptor.id,
            internal_key=descriptor.id,
            name=xml_text(str(descriptor.title)),
            description=build_description(descriptor),
            severity=SONAR_SEVERITY.get(descriptor.default_severity, SonarSeverity.MAJOR),
            cardinality=self.cardinality,
            status=self.status,
            tags=tags,
        )


def _flatten(analyzers: Iterable[Analyzer]) -> Iterator[DiagnosticDescriptor]:
    for analyzer in analyzers:
        yield from analyzer.supported_diagnostics()
