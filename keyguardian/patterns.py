"""
Pattern Registry

Built-in secret detectors plus compilation of user supplied custom patterns.
"""

import logging
import re
from typing import Optional, Tuple, Union

from .config import ConfigError
from .models import CustomPattern, Detector, GuardianConfig, Severity

logger = logging.getLogger(__name__)


class PatternError(ConfigError):
    """A custom pattern could not be compiled"""


# Order is preserved in the output, it carries no priority
BUILTIN_PATTERNS = [
    # Generic API keys
    (
        "Generic API Key",
        r"""['"](api[_-]?key|apikey)['"]\s*[:=]\s*['"][a-zA-Z0-9_-]{16,}['"]""",
        Severity.HIGH,
    ),
    (
        "Generic Secret",
        r"""['"](secret|token)['"]\s*[:=]\s*['"][a-zA-Z0-9_-]{16,}['"]""",
        Severity.HIGH,
    ),
    # AWS
    ("AWS Access Key", r"AKIA[0-9A-Z]{16}", Severity.CRITICAL),
    (
        "AWS Secret Key",
        r"""['"](aws_secret_access_key|AWS_SECRET_ACCESS_KEY)['"]\s*[:=]\s*['"][a-zA-Z0-9/+=]{40}['"]""",
        Severity.CRITICAL,
    ),
    # Google
    ("Google API Key", r"AIza[0-9A-Za-z_-]{35}", Severity.HIGH),
    (
        "Google OAuth Client",
        r"[0-9]+-[0-9A-Za-z_]{32}\.apps\.googleusercontent\.com",
        Severity.HIGH,
    ),
    # GitHub
    ("GitHub Token", r"ghp_[a-zA-Z0-9]{36}", Severity.CRITICAL),
    ("GitHub App Token", r"ghs_[a-zA-Z0-9]{36}", Severity.CRITICAL),
    # Stripe
    ("Stripe API Key", r"(sk|pk)_(test|live)_[a-zA-Z0-9]{24,}", Severity.CRITICAL),
    # Slack
    ("Slack Token", r"xox[baprs]-[a-zA-Z0-9-]{10,}", Severity.HIGH),
    # JWT
    ("JWT Token", r"eyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+", Severity.MEDIUM),
    # Database URLs
    (
        "Database URL",
        r"""(mongodb(?:\+srv)?|mysql|postgresql)://[^\s'"]+:[^\s'"]+@[^\s'"]+""",
        Severity.HIGH,
    ),
    # Generic patterns
    ("Private Key Block", r"-----BEGIN [A-Z ]+PRIVATE KEY-----", Severity.CRITICAL),
    ("Bearer Token", r"Bearer\s+[a-zA-Z0-9_-]{20,}", Severity.MEDIUM),
]

# "/body/flags" literal syntax, as written in JSON configuration files
_DELIMITED_PATTERN = re.compile(r"^/(?P<body>.+)/(?P<flags>[a-zA-Z]*)$", re.DOTALL)

_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,  # str patterns are always unicode
    "g": 0,  # every match is reported anyway
}

BUILTIN_DETECTORS: Tuple[Detector, ...] = tuple(
    Detector(name=name, matcher=re.compile(pattern), severity=severity)
    for name, pattern, severity in BUILTIN_PATTERNS
)


def _parse_flags(flags: str) -> Optional[int]:
    """Combined re flags, or None when a character is not a known flag"""
    value = 0
    for flag in flags:
        if flag not in _FLAG_MAP:
            return None
        value |= _FLAG_MAP[flag]
    return value


def compile_pattern(source: Union[str, re.Pattern], name: Optional[str] = None) -> re.Pattern:
    """
    Resolve a custom pattern source into a compiled matcher

    Args:
        source: A compiled pattern (used as-is), a delimited "/body/flags"
            string, or a raw pattern body
        name: Detector name, used in error messages

    Returns:
        Compiled regular expression

    Raises:
        PatternError: If the pattern is empty, is a bytes pattern or does not compile
    """
    label = name or str(source)

    if isinstance(source, re.Pattern):
        if not isinstance(source.pattern, str):
            raise PatternError(f"Custom pattern '{label}' must be a text pattern, not bytes")
        return source

    if not isinstance(source, str) or not source:
        raise PatternError(f"Custom pattern '{label}' is empty or not a string")

    body, flags = source, 0
    delimited = _DELIMITED_PATTERN.match(source)
    if delimited:
        # "/api/v1/token" has no valid flag suffix, so it stays a raw body
        parsed = _parse_flags(delimited.group("flags"))
        if parsed is not None:
            body, flags = delimited.group("body"), parsed

    try:
        return re.compile(body, flags)
    except re.error as e:
        raise PatternError(f"Custom pattern '{label}' is not a valid regular expression: {e}") from e


def build_detector(custom: CustomPattern) -> Detector:
    """Compile one configured custom pattern"""
    return Detector(
        name=custom.name,
        matcher=compile_pattern(custom.pattern, custom.name),
        severity=custom.severity,
    )


def build_registry(config: Optional[GuardianConfig] = None) -> Tuple[Detector, ...]:
    """
    Build the ordered detector registry

    Built-in detectors come first, custom detectors are appended in
    configuration order. A built-in is never replaced by a custom detector
    with the same name.
    """
    config = config or GuardianConfig()
    custom = tuple(build_detector(item) for item in config.custom_patterns)
    if custom:
        logger.debug(f"Loaded {len(custom)} custom pattern(s)")
    return BUILTIN_DETECTORS + custom
