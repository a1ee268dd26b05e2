"""
Ignore Resolver

Decides whether a path is excluded from scanning. Rules are parsed once into
tagged IgnoreRule values; evaluation is case-insensitive and treats both
path separators as "/".
"""

import os
import re
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .models import GuardianConfig

PathLike = Union[str, os.PathLike]

# Always present, prepended to the user configuration
DEFAULT_IGNORED_FILES = (".git/", "node_modules/", ".env.example")
DEFAULT_IGNORED_EXTENSIONS = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".ico",
    ".pdf",
    ".zip",
    ".gz",
    ".tar",
    ".tgz",
    ".exe",
    ".dll",
    ".so",
    ".woff",
    ".woff2",
)


class RuleKind(str, Enum):
    """How an ignore rule is matched"""

    DIRECTORY = "directory"
    WILDCARD = "wildcard"
    EXACT = "exact"


class IgnoreRule(BaseModel):
    """A configured ignore criterion, categorized once"""

    model_config = ConfigDict(frozen=True)

    kind: RuleKind
    value: str
    matcher: Optional[re.Pattern] = None
    # Wildcard written with a trailing "/": matches directories and their contents only
    directory_only: bool = False

    def matches(self, relative: str, segments: Sequence[str], is_dir: bool = False) -> bool:
        if self.kind == RuleKind.DIRECTORY:
            return self.value in segments or relative.startswith(self.value + "/")
        if self.kind == RuleKind.WILDCARD:
            if self.directory_only:
                return self.matcher.match(relative + "/" if is_dir else relative) is not None
            return self.matcher.match(relative) is not None
        return (
            relative == self.value
            or relative.endswith("/" + self.value)
            or segments[-1] == self.value
        )


def normalize_path(path: PathLike) -> str:
    return os.fspath(path).replace("\\", "/").lower()


def _strip_anchor(text: str) -> str:
    while text.startswith("./"):
        text = text[2:]
    return text.lstrip("/")


def _wildcard_matcher(body: str, directory_only: bool = False) -> re.Pattern:
    # "*" spans any run of characters, separators included; the rule may match
    # the whole relative path or any trailing sub-path of it
    translated = ".*".join(re.escape(part) for part in body.split("*"))
    if directory_only:
        return re.compile(f"(?:|.*/){translated}/.*$", re.DOTALL)
    return re.compile(f"(?:|.*/){translated}(?:/.*)?$", re.DOTALL)


def parse_rule(raw: str) -> Optional[IgnoreRule]:
    """Categorize one configured ignore string; returns None for blank rules"""
    text = normalize_path(raw.strip())
    is_directory = text.endswith("/")
    body = _strip_anchor(text).rstrip("/")
    if not body:
        return None

    if "*" in body:
        return IgnoreRule(
            kind=RuleKind.WILDCARD,
            value=body,
            matcher=_wildcard_matcher(body, is_directory),
            directory_only=is_directory,
        )
    if is_directory:
        return IgnoreRule(kind=RuleKind.DIRECTORY, value=body)
    return IgnoreRule(kind=RuleKind.EXACT, value=body)


def parse_rules(raw_rules: Sequence[str]) -> Tuple[IgnoreRule, ...]:
    rules = (parse_rule(raw) for raw in raw_rules)
    return tuple(rule for rule in rules if rule is not None)


def relative_path(path: PathLike, root: PathLike) -> Optional[str]:
    """
    Normalized path relative to root, or None when the path is the root
    itself or lies outside it
    """
    try:
        relative = os.path.relpath(os.path.abspath(path), os.path.abspath(root))
    except ValueError:
        # Different drive on Windows
        return None

    relative = normalize_path(relative)
    if relative in ("", ".") or relative == ".." or relative.startswith("../"):
        return None
    return relative


class IgnoreResolver:
    """Evaluates a fixed rule set against paths; holds no mutable state"""

    def __init__(self, config: Optional[GuardianConfig] = None, root: Optional[PathLike] = None):
        config = config or GuardianConfig()
        self.root = os.path.abspath(root) if root is not None else os.getcwd()
        self.rules: Tuple[IgnoreRule, ...] = parse_rules(
            list(DEFAULT_IGNORED_FILES) + list(config.ignored_files)
        )
        self._checks_directories = any(rule.directory_only for rule in self.rules)
        self.extensions: Tuple[str, ...] = tuple(
            normalize_path(ext)
            for ext in list(DEFAULT_IGNORED_EXTENSIONS) + list(config.ignored_extensions)
            if ext
        )

    def should_ignore(self, path: PathLike) -> bool:
        """True when any directory, wildcard, name or extension rule matches"""
        if self._matches_extension(path):
            return True

        relative = relative_path(path, self.root)
        if relative is None:
            return False

        segments: List[str] = [segment for segment in relative.split("/") if segment]
        is_dir = self._checks_directories and os.path.isdir(path)
        return any(rule.matches(relative, segments, is_dir) for rule in self.rules)

    def _matches_extension(self, path: PathLike) -> bool:
        normalized = normalize_path(os.path.abspath(path))
        return any(normalized.endswith(ext) for ext in self.extensions)


def should_ignore(
    path: PathLike, config: Optional[GuardianConfig] = None, root: Optional[PathLike] = None
) -> bool:
    """
    Decide whether a path is excluded from scanning

    Args:
        path: File or directory path, absolute or relative to the working directory
        config: Scan configuration; built-in rules apply when omitted
        root: Project root, defaults to the current working directory

    Returns:
        True if the path must not be scanned
    """
    return IgnoreResolver(config, root).should_ignore(path)
