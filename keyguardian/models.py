"""
Data models for KeyGuardian
"""

import re
from enum import Enum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    """Risk tier attached to each detector"""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Higher is more severe; only used for display ordering"""
        return _SEVERITY_RANKS[self]


_SEVERITY_RANKS = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


def _coerce_severity(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class Detector(BaseModel):
    """A named pattern used to scan file content"""

    model_config = ConfigDict(frozen=True)

    name: str
    matcher: re.Pattern
    severity: Severity

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value: Any) -> Any:
        return _coerce_severity(value)


class CustomPattern(BaseModel):
    """A user supplied detector, before compilation"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    # Either a compiled re.Pattern or a string ("/body/flags" or a raw body)
    pattern: Any
    severity: Severity = Severity.MEDIUM

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value: Any) -> Any:
        return _coerce_severity(value)

    @field_validator("pattern")
    @classmethod
    def check_pattern_source(cls, value: Any) -> Any:
        if isinstance(value, (str, re.Pattern)):
            return value
        raise ValueError("pattern must be a string or a compiled regular expression")


class GuardianConfig(BaseModel):
    """Configuration for scanning, read-only for the lifetime of a scan"""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    ignored_files: List[str] = Field(default_factory=list, alias="ignoredFiles")
    ignored_extensions: List[str] = Field(default_factory=list, alias="ignoredExtensions")
    custom_patterns: List[CustomPattern] = Field(default_factory=list, alias="customPatterns")

    # Performance settings
    max_workers: int = Field(default=8, ge=1, alias="maxWorkers")


class Finding(BaseModel):
    """One secret-shaped match found in a file"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file: str
    line: int = Field(ge=1)
    pattern_name: str = Field(alias="patternName")
    severity: Severity
    match_snippet: str = Field(alias="matchSnippet")
    full_match: str = Field(alias="fullMatch")
    line_content: str = Field(default="", alias="lineContent")


class ScanWarning(BaseModel):
    """A file or directory that could not be read"""

    path: str
    message: str


class ScanResult(BaseModel):
    """Complete scan results"""

    root: str
    findings: List[Finding]
    files_scanned: int
    warnings: List[ScanWarning] = Field(default_factory=list)
    scan_duration_seconds: float
    timestamp: str

    @property
    def has_findings(self) -> bool:
        return bool(self.findings)
