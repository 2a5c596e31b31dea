"""Serialize rule sets to and from the SonarQube ``rules.xml`` format.

The document layout is::

    <rules>
      <rule>
        <key>CA1001</key>
        <name>...</name>
        <internalKey>CA1001</internalKey>
        <description>...</description>
        <severity>MAJOR</severity>
        <cardinality>SINGLE</cardinality>
        <status>READY</status>
        <tag>design</tag>
      </rule>
    </rules>

Descriptions are written as escaped text, never as CDATA sections.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import TYPE_CHECKING

from sonarpack.core._types import Cardinality, RuleStatus, SonarSeverity
from sonarpack.core.errors import SonarpackError
from sonarpack.core.rule import Rule, RuleSet

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sonarpack.core._types import StrPath


class RulesXmlError(SonarpackError):
    """Raised when a ``rules.xml`` document cannot be parsed."""


# Characters outside the XML 1.0 Char production.
_ILLEGAL_XML_CHARS = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def xml_text(text: str) -> str:
    """Return *text* as it will read back from ``rules.xml``.

    Line endings become ``\\n`` (XML parsers normalize them anyway) and
    characters XML 1.0 cannot represent are dropped.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _ILLEGAL_XML_CHARS.sub("", text)


def to_element(rules: Iterable[Rule]) -> ET.Element:
    root = ET.Element("rules")
    for rule in rules:
        node = ET.SubElement(root, "rule")
        ET.SubElement(node, "key").text = xml_text(rule.key)
        ET.SubElement(node, "name").text = xml_text(rule.name)
        ET.SubElement(node, "internalKey").text = xml_text(rule.internal_key)
        ET.SubElement(node, "description").text = xml_text(rule.description)
        ET.SubElement(node, "severity").text = str(rule.severity)
        ET.SubElement(node, "cardinality").text = str(rule.cardinality)
        ET.SubElement(node, "status").text = str(rule.status)
        for tag in rule.tags or ():
            ET.SubElement(node, "tag").text = xml_text(tag)
    return root


def to_xml(rules: Iterable[Rule]) -> str:
    """Render *rules* as a UTF-8 ``rules.xml`` document string."""
    root = to_element(rules)
    ET.indent(root)
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="utf-8"?>\n{body}\n'


def write_rules(rules: Iterable[Rule], path: StrPath) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(to_xml(rules), encoding="utf-8")
    return target


def parse_rules(text: str | bytes) -> RuleSet:
    try:
        root = ET.fromstring(text)  # noqa: S314
    except ET.ParseError as exc:
        raise RulesXmlError(f"Invalid rules XML: {exc}") from exc
    if root.tag != "rules":
        raise RulesXmlError(f"Expected <rules> root element, got <{root.tag}>")

    rules = RuleSet()
    for node in root.iterfind("rule"):
        rules.add(_parse_rule(node))
    return rules


def load_rules(path: StrPath) -> RuleSet:
    return parse_rules(Path(path).read_bytes())


def _parse_rule(node: ET.Element) -> Rule:
    key = node.findtext("key", "")
    if not key:
        raise RulesXmlError("<rule> element without a <key>")
    tags = tuple(t.text or "" for t in node.iterfind("tag"))
    try:
        return Rule(
            key=key,
            name=node.findtext("name", ""),
            description=node.findtext("description", ""),
            internal_key=node.findtext("internalKey", ""),
            severity=SonarSeverity(node.findtext("severity", SonarSeverity.MAJOR)),
            cardinality=Cardinality(node.findtext("cardinality", Cardinality.SINGLE)),
            status=RuleStatus(node.findtext("status", RuleStatus.READY)),
            tags=tags or None,
        )
    except ValueError as exc:
        raise RulesXmlError(f"Rule {key}: {exc}") from exc
