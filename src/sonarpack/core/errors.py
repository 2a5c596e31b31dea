class SonarpackError(Exception):
    """Base class for errors raised by sonarpack."""


class ConfigError(SonarpackError, ValueError):
    """Raised when a config file contains an invalid value."""


class JdkNotFoundError(SonarpackError, RuntimeError):
    """Raised when a plugin build starts without a usable JDK."""


class CompilerError(SonarpackError):
    """Raised when ``javac`` fails to compile the plugin sources."""


class LoadError(SonarpackError):
    """Raised when an analyzer cannot be loaded."""
