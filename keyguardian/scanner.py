"""
File Scanner

Applies the detector registry to the content of a single file.
"""

import codecs
import logging
import os
from typing import List, Optional, Sequence, Tuple

from .models import Detector, Finding, ScanWarning

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 1024 * 1024  # 1 MiB
SNIPPET_LENGTH = 50
ELLIPSIS = "..."


def truncate_match(text: str, limit: int = SNIPPET_LENGTH) -> str:
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def line_bounds(content: str, offset: int) -> Tuple[int, str]:
    """Return the 1-based line number and the trimmed line containing offset"""
    line_number = content.count("\n", 0, offset) + 1
    start = content.rfind("\n", 0, offset) + 1
    end = content.find("\n", offset)
    if end == -1:
        end = len(content)
    return line_number, content[start:end].strip()


def display_path(path: str, root: Optional[str]) -> str:
    """Path relative to the scan root, "/"-separated; outside paths are kept as given"""
    if root is None:
        return path.replace("\\", "/")
    try:
        relative = os.path.relpath(os.path.abspath(path), root)
    except ValueError:
        return path.replace("\\", "/")
    if relative == ".." or relative.startswith(".." + os.sep):
        return path.replace("\\", "/")
    return relative.replace("\\", "/")


class FileScanner:
    """Scans one file at a time against an immutable detector registry"""

    def __init__(
        self,
        detectors: Sequence[Detector],
        root: Optional[str] = None,
        max_file_size: int = MAX_FILE_SIZE,
    ):
        self.detectors = tuple(detectors)
        self.root = os.path.abspath(root) if root is not None else None
        self.max_file_size = max_file_size

    def scan_text(self, content: str, file: str) -> List[Finding]:
        """
        Scan in-memory content

        Findings are grouped by detector in registry order, then in document
        order within each detector. They are not sorted by line.
        """
        findings = []
        for detector in self.detectors:
            for match in detector.matcher.finditer(content):
                matched = match.group(0)
                if not matched:
                    continue
                line_number, line_content = line_bounds(content, match.start())
                findings.append(
                    Finding(
                        file=file,
                        line=line_number,
                        pattern_name=detector.name,
                        severity=detector.severity,
                        match_snippet=truncate_match(matched),
                        full_match=matched,
                        line_content=line_content,
                    )
                )
        return findings

    def scan_file(self, path: str) -> List[Finding]:
        """
        Scan a file on disk

        Never raises for per-file problems: missing, oversized and binary
        files yield no findings; unreadable files are logged as warnings.
        """
        findings, _ = self.scan_file_with_warning(path)
        return findings

    def scan_file_with_warning(self, path: str) -> Tuple[List[Finding], Optional[ScanWarning]]:
        """Like scan_file, also returning the warning for an unreadable file"""
        path = os.fspath(path)
        try:
            if os.stat(path).st_size > self.max_file_size:
                logger.debug(f"Skipping {path}: larger than {self.max_file_size} bytes")
                return [], None

            with open(path, "rb") as f:
                raw = f.read(self.max_file_size + 1)
        except FileNotFoundError:
            return [], None
        except OSError as e:
            logger.warning(f"Could not read file {path}: {e}")
            return [], ScanWarning(path=path, message=str(e))

        # The file may have grown since stat
        if len(raw) > self.max_file_size:
            logger.debug(f"Skipping {path}: larger than {self.max_file_size} bytes")
            return [], None

        if raw.startswith(codecs.BOM_UTF8):
            raw = raw[len(codecs.BOM_UTF8) :]
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug(f"Skipping {path}: not valid UTF-8 text")
            return [], None

        return self.scan_text(content, display_path(path, self.root)), None
