from importlib.metadata import version

from sonarpack.build.jar import JarBuilder
from sonarpack.build.jdk import JdkWrapper
from sonarpack.build.plugin import PluginBuilder
from sonarpack.core._types import Cardinality, DiagnosticSeverity, RuleStatus, SonarSeverity
from sonarpack.core.config import SonarpackConfig, load_config
from sonarpack.core.descriptor import Analyzer, ConfigurableAnalyzer, DiagnosticDescriptor
from sonarpack.core.errors import (
    CompilerError,
    ConfigError,
    JdkNotFoundError,
    LoadError,
    SonarpackError,
)
from sonarpack.core.rule import Rule, RuleSet
from sonarpack.rules import NO_DESCRIPTION, RuleGenerator

__version__ = version("sonarpack")


__all__ = [
    "NO_DESCRIPTION",
    "Analyzer",
    "Cardinality",
    "CompilerError",
    "ConfigError",
    "ConfigurableAnalyzer",
    "DiagnosticDescriptor",
    "DiagnosticSeverity",
    "JarBuilder",
    "JdkNotFoundError",
    "JdkWrapper",
    "LoadError",
    "PluginBuilder",
    "Rule",
    "RuleGenerator",
    "RuleSet",
    "RuleStatus",
    "SonarSeverity",
    "SonarpackConfig",
    "SonarpackError",
    "__version__",
    "load_config",
]
