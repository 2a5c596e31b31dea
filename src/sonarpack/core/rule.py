from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, overload

from sonarpack.core._types import Cardinality, RuleStatus, SonarSeverity

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(frozen=True, slots=True)
class Rule:
    """A SonarQube rule definition, as written to ``rules.xml``.

    Rule instances are pure data.  They are produced by
    :class:`~sonarpack.rules.generator.RuleGenerator` from analyzer
    descriptors and consumed by the XML serializer.
    """

    key: str
    name: str
    description: str
    internal_key: str = ""
    severity: SonarSeverity = SonarSeverity.MAJOR
    cardinality: Cardinality = Cardinality.SINGLE
    status: RuleStatus = RuleStatus.READY
    tags: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if not self.internal_key:
            object.__setattr__(self, "internal_key", self.key)

    def __str__(self) -> str:
        return f"[{self.key}] {self.name}"


class RuleSet:
    """Ordered collection of rules with unique keys."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[str, Rule] = {}
        for rule in rules:
            self.add(rule)

    def add(self, rule: Rule) -> None:
        if rule.key in self._rules:
            msg = f"Duplicate rule key: {rule.key}"
            raise ValueError(msg)
        self._rules[rule.key] = rule

    def get(self, key: str) -> Rule | None:
        return self._rules.get(key)

    @property
    def keys(self) -> list[str]:
        return list(self._rules)

    def __contains__(self, key: object) -> bool:
        return key in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    @overload
    def __getitem__(self, index: int) -> Rule: ...
    @overload
    def __getitem__(self, index: str) -> Rule: ...
    def __getitem__(self, index: int | str) -> Rule:
        if isinstance(index, str):
            return self._rules[index]
        return list(self._rules.values())[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return list(self) == list(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RuleSet({list(self._rules.values())!r})"
