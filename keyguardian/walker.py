"""
Tree Walker

Enumerates the files to scan, consulting the ignore resolver before opening
any directory and before accepting any file.
"""

import logging
import os
import stat
from typing import Iterable, List, Set, Tuple

from .ignore import IgnoreResolver

logger = logging.getLogger(__name__)


class TreeWalker:
    """Depth-first file collection; entries are visited in sorted name order"""

    def __init__(self, resolver: IgnoreResolver):
        self.resolver = resolver

    def collect(self, target: str) -> List[str]:
        """
        Collect scan targets below a directory, or the file itself

        Args:
            target: Directory to walk, or a single file

        Returns:
            Absolute file paths, in traversal order
        """
        path = os.path.abspath(target)
        if self.resolver.should_ignore(path):
            return []
        if os.path.isfile(path):
            return [path]
        if not os.path.isdir(path):
            return []

        files: List[str] = []
        self._walk(path, files, set())
        return files

    def _walk(self, directory: str, files: List[str], visited: Set[Tuple[int, int]]) -> None:
        try:
            info = os.stat(directory)
            names = sorted(os.listdir(directory))
        except OSError as e:
            logger.debug(f"Could not read directory {directory}: {e}")
            return

        # Symlinked directories may point back at an ancestor
        key = (info.st_dev, info.st_ino)
        if key in visited:
            return
        visited.add(key)

        for name in names:
            child = os.path.join(directory, name)
            if self.resolver.should_ignore(child):
                continue
            try:
                mode = os.stat(child).st_mode
            except OSError:
                # Dangling symlink, permission denied, vanished entry
                continue

            if stat.S_ISDIR(mode):
                self._walk(child, files, visited)
            elif stat.S_ISREG(mode):
                files.append(child)

    def collect_targets(self, targets: Iterable[str]) -> List[str]:
        """Explicit target list: files are taken directly, directories are walked"""
        files: List[str] = []
        for target in targets:
            path = os.path.abspath(target)
            if not os.path.exists(path):
                logger.warning(f"Path does not exist: {target}")
                continue
            files.extend(self.collect(path))
        return files

    def filter_known(self, paths: Iterable[str]) -> List[str]:
        """
        Filter an already-known file list, such as the files staged for commit

        No traversal takes place; the ignore rules are still applied per file.
        """
        files = []
        for path in paths:
            absolute = os.path.abspath(path)
            if self.resolver.should_ignore(absolute):
                continue
            if os.path.isfile(absolute):
                files.append(absolute)
        return files
