"""nsrules package root."""

from nsrules.exceptions import ConfigError, InvalidPattern, NsRulesError
from nsrules.patterns import NamespacePattern, compile_pattern

__all__ = [
    "__version__",
    "ConfigError",
    "InvalidPattern",
    "NamespacePattern",
    "NsRulesError",
    "compile_pattern",
]

__version__ = "1.0.0"
