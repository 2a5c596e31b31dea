import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from sonarpack.core._types import Cardinality, RuleStatus, SonarSeverity
from sonarpack.core.rule import Rule, RuleSet
from sonarpack.rules.generator import RuleGenerator
from sonarpack.rules.serializer import (
    RulesXmlError,
    load_rules,
    parse_rules,
    to_xml,
    write_rules,
)
from tests.conftest import TEST_LOGGER, make_analyzer

_RULE = Rule(
    key="CA1001",
    name="Dispose fields",
    description="Types that own <disposable> fields & more ]]>",
    severity=SonarSeverity.CRITICAL,
    tags=("design", "reliability"),
)


# RuleSet


def test_internal_key_defaults_to_key() -> None:
    assert _RULE.internal_key == "CA1001"


def test_rule_set_rejects_duplicate_keys() -> None:
    rules = RuleSet([_RULE])
    with pytest.raises(ValueError, match="Duplicate rule key"):
        rules.add(_RULE)


def test_rule_set_lookup() -> None:
    other = Rule(key="X", name="x", description="d")
    rules = RuleSet([_RULE, other])
    assert rules["X"] is other
    assert rules[0] is _RULE
    assert rules.get("missing") is None
    assert "CA1001" in rules
    assert rules.keys == ["CA1001", "X"]


# Serialization


def test_xml_structure() -> None:
    root = ET.fromstring(to_xml([_RULE]))
    assert root.tag == "rules"
    (node,) = root.findall("rule")
    assert [child.tag for child in node] == [
        "key",
        "name",
        "internalKey",
        "description",
        "severity",
        "cardinality",
        "status",
        "tag",
        "tag",
    ]
    assert node.findtext("severity") == "CRITICAL"
    assert node.findtext("cardinality") == "SINGLE"
    assert node.findtext("status") == "READY"
    assert [t.text for t in node.iterfind("tag")] == ["design", "reliability"]


def test_description_is_escaped_not_cdata() -> None:
    text = to_xml([_RULE])
    assert "<![CDATA[" not in text
    assert "&lt;disposable&gt; fields &amp; more ]]&gt;" in text


def test_no_tag_elements_without_tags() -> None:
    rule = Rule(key="K", name="n", description="d")
    assert "<tag>" not in to_xml([rule])


def test_xml_declaration() -> None:
    assert to_xml([]).startswith('<?xml version="1.0" encoding="utf-8"?>')


def test_generated_rules_survive_round_trip(tmp_path: Path) -> None:
    analyzer = make_analyzer(
        {"key": "A1", "description": "first", "help_link_uri": "http://a1", "tags": ["x"]},
        {"key": "A2", "description": None},
    )
    gen = RuleGenerator(TEST_LOGGER, status=RuleStatus.BETA, cardinality=Cardinality.MULTIPLE)
    rules = gen.generate_rules([analyzer])

    path = write_rules(rules, tmp_path / "nested" / "rules.xml")

    assert path.exists()
    assert load_rules(path) == rules


def test_crlf_description_survives_round_trip(tmp_path: Path) -> None:
    analyzer = make_analyzer({"key": "A1", "description": "line1\r\nline2\rline3"})
    rules = RuleGenerator(TEST_LOGGER).generate_rules([analyzer])

    assert rules["A1"].description == "line1\nline2\nline3"
    assert load_rules(write_rules(rules, tmp_path / "rules.xml")) == rules


def test_control_characters_are_dropped() -> None:
    analyzer = make_analyzer(
        {"key": "A1", "title": "Bell\x07", "description": "ring\x07 the\x00 bell"},
    )
    rules = RuleGenerator(TEST_LOGGER).generate_rules([analyzer])

    parsed = parse_rules(to_xml(rules))

    assert parsed == rules
    assert parsed["A1"].name == "Bell"
    assert parsed["A1"].description == "ring the bell"


def test_hand_built_rule_with_control_characters_is_well_formed() -> None:
    rule = Rule(key="A1", name="n", description="a\x1bb\r\nc", severity=SonarSeverity.MAJOR)

    root = ET.fromstring(to_xml([rule]).encode())

    assert root.findtext("rule/description") == "ab\nc"


# Parsing errors


def test_parse_invalid_xml() -> None:
    with pytest.raises(RulesXmlError, match="Invalid rules XML"):
        parse_rules("<rules><rule>")


def test_parse_wrong_root() -> None:
    with pytest.raises(RulesXmlError, match="Expected <rules>"):
        parse_rules("<profile/>")


def test_parse_missing_key() -> None:
    with pytest.raises(RulesXmlError, match="without a <key>"):
        parse_rules("<rules><rule><name>n</name></rule></rules>")


def test_parse_unknown_severity() -> None:
    doc = "<rules><rule><key>K</key><severity>EXTREME</severity></rule></rules>"
    with pytest.raises(RulesXmlError, match="Rule K"):
        parse_rules(doc)


def test_parse_defaults() -> None:
    (rule,) = parse_rules("<rules><rule><key>K</key></rule></rules>")
    assert rule.internal_key == "K"
    assert rule.severity == SonarSeverity.MAJOR
    assert rule.tags is None
