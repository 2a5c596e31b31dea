from sonarpack.rules.generator import (
    DEFAULT_CARDINALITY,
    DEFAULT_STATUS,
    NO_DESCRIPTION,
    RuleGenerator,
    build_description,
)
from sonarpack.rules.serializer import RulesXmlError, load_rules, parse_rules, to_xml, write_rules

__all__ = [
    "DEFAULT_CARDINALITY",
    "DEFAULT_STATUS",
    "NO_DESCRIPTION",
    "RuleGenerator",
    "RulesXmlError",
    "build_description",
    "load_rules",
    "parse_rules",
    "to_xml",
    "write_rules",
]
