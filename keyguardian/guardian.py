"""
KeyGuardian

Main module that wires the pattern registry, ignore resolver, file scanner
and tree walker together and aggregates findings into a ScanResult.
"""

import asyncio
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence

from .ignore import IgnoreResolver
from .models import Finding, GuardianConfig, ScanResult, ScanWarning
from .patterns import build_registry
from .scanner import FileScanner
from .walker import TreeWalker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class KeyGuardian:
    """Entry points for scanning files, directories and explicit path lists"""

    def __init__(self, config: Optional[GuardianConfig] = None, root: Optional[str] = None):
        """
        Initialize the guardian

        Args:
            config: Optional GuardianConfig, will use defaults if not provided
            root: Project root for ignore rules and reported paths,
                defaults to the current working directory

        Raises:
            PatternError: If a custom pattern does not compile
        """
        self.config = config or GuardianConfig()
        self.root = os.path.abspath(root) if root else os.getcwd()

        # Custom patterns compile before any file is read
        self.detectors = build_registry(self.config)
        self.resolver = IgnoreResolver(self.config, self.root)
        self.scanner = FileScanner(self.detectors, root=self.root)
        self.walker = TreeWalker(self.resolver)

    def should_ignore(self, path: str) -> bool:
        return self.resolver.should_ignore(path)

    def scan_file(self, path: str) -> List[Finding]:
        """Scan a single file, regardless of ignore rules"""
        return self.scanner.scan_file(path)

    def scan_directory(
        self, path: Optional[str] = None, progress: Optional[ProgressCallback] = None
    ) -> ScanResult:
        """Recursively scan a directory, the project root by default"""
        files = self.walker.collect(path or self.root)
        logger.debug(f"Collected {len(files)} files for scanning")
        return self._scan(files, progress)

    def scan_project(self, progress: Optional[ProgressCallback] = None) -> ScanResult:
        return self.scan_directory(self.root, progress)

    def scan_targets(
        self, targets: Iterable[str], progress: Optional[ProgressCallback] = None
    ) -> ScanResult:
        """Scan explicit targets: files directly, directories recursively"""
        files = self.walker.collect_targets(targets)
        return self._scan(files, progress)

    def scan_paths(
        self, paths: Iterable[str], progress: Optional[ProgressCallback] = None
    ) -> ScanResult:
        """
        Scan an already-known file list, such as the files staged for commit

        Ignore rules are applied per file; nothing is traversed.
        """
        files = self.walker.filter_known(paths)
        return self._scan(files, progress)

    async def scan_directory_concurrently(self, path: Optional[str] = None) -> ScanResult:
        files = self.walker.collect(path or self.root)
        return await self._scan_concurrently(files)

    async def scan_paths_concurrently(self, paths: Iterable[str]) -> ScanResult:
        files = self.walker.filter_known(paths)
        return await self._scan_concurrently(files)

    def _scan(self, files: Sequence[str], progress: Optional[ProgressCallback] = None) -> ScanResult:
        start_time = time.time()
        findings: List[Finding] = []
        warnings: List[ScanWarning] = []

        total = len(files)
        for index, file_path in enumerate(files, 1):
            if progress:
                progress(index, total, file_path)
            file_findings, warning = self.scanner.scan_file_with_warning(file_path)
            findings.extend(file_findings)
            if warning:
                warnings.append(warning)

        return self._build_result(findings, warnings, total, start_time)

    async def _scan_concurrently(self, files: Sequence[str]) -> ScanResult:
        """
        Scan files on a bounded thread pool

        Results are concatenated in input order, so the output matches the
        sequential scan. Cancelling the awaiting task drops queued files.
        """
        start_time = time.time()
        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(max_workers=self.config.max_workers)

        try:
            tasks = [
                loop.run_in_executor(executor, self.scanner.scan_file_with_warning, file_path)
                for file_path in files
            ]
            results = await asyncio.gather(*tasks)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        findings: List[Finding] = []
        warnings: List[ScanWarning] = []
        for file_findings, warning in results:
            findings.extend(file_findings)
            if warning:
                warnings.append(warning)

        return self._build_result(findings, warnings, len(files), start_time)

    def _build_result(
        self,
        findings: List[Finding],
        warnings: List[ScanWarning],
        files_scanned: int,
        start_time: float,
    ) -> ScanResult:
        result = ScanResult(
            root=self.root,
            findings=findings,
            files_scanned=files_scanned,
            warnings=warnings,
            scan_duration_seconds=time.time() - start_time,
            timestamp=datetime.now().isoformat(),
        )
        logger.info(
            f"Scanned {result.files_scanned} files, found {len(result.findings)} potential secrets"
        )
        return result
