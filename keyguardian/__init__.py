"""
KeyGuardian - API Key and Secret Detection Tool

Scans project files for accidentally committed secrets and blocks commits
and pushes when any are found.
"""

__version__ = "0.1.0"
__author__ = "KeyGuardian Team"
__description__ = "API Key and Secret Detection Tool"

from .config import ConfigError, load_config
from .guardian import KeyGuardian
from .ignore import IgnoreResolver, should_ignore
from .models import Detector, Finding, GuardianConfig, ScanResult, Severity
from .patterns import PatternError, build_registry
from .scanner import FileScanner

__all__ = [
    "ConfigError",
    "Detector",
    "FileScanner",
    "Finding",
    "GuardianConfig",
    "IgnoreResolver",
    "KeyGuardian",
    "PatternError",
    "ScanResult",
    "Severity",
    "build_registry",
    "load_config",
    "should_ignore",
]
