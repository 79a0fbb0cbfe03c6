"""
Unified command orchestrator for duplicate scans.
This is the SINGLE source of truth for business logic — used by both GUI and CLI.
No Qt/PySide6 dependencies — pure Python.
"""
from typing import List, Optional, Tuple
from dupfinder.core.deduplicator import DeduplicatorImpl
from dupfinder.core.interfaces import LogSink
from dupfinder.core.models import ScanParams, ScanResult
from dupfinder.core.watcher import FileWatcher
from dupfinder.core.errors import DupfinderError
import logging

logger = logging.getLogger(__name__)


class DuplicateScanCommand:
    """
    Orchestrates the scan workflow:
    1. Scan the root directory and group identical files
    2. Optionally register every reported path with a FileWatcher

    Usage:
        # For GUI (log lines marshalled by the worker):
        command = DuplicateScanCommand()
        result = command.execute(params, log_sink=qt_log_adapter)

        # For CLI (log lines printed to stderr):
        result = command.execute(params, log_sink=cli_log_printer)
        registered, skipped = command.watch(result, watcher)
    """

    def __init__(self, deduplicator: Optional[DeduplicatorImpl] = None):
        self._deduplicator = deduplicator or DeduplicatorImpl()

    def execute(self, params: ScanParams, log_sink: Optional[LogSink] = None) -> ScanResult:
        """
        Execute a scan with given parameters.

        Args:
            params: Validated scan parameters
            log_sink: (line: str) -> None, called from the scanning thread

        Returns:
            ScanResult with every duplicate class under params.root_dir

        Raises:
            RootUnreadable: If the root cannot be traversed
        """
        return self._deduplicator.find_duplicates(params, log_sink)

    @staticmethod
    def watch(result: ScanResult, watcher: FileWatcher) -> Tuple[int, List[str]]:
        """
        Registers every path of `result` with `watcher`.
        Paths that cannot be watched are logged and skipped.

        Returns:
            (number of paths registered, paths skipped)
        """
        registered = 0
        skipped = []
        for path in result.paths():
            try:
                watcher.add_file(path)
                registered += 1
            except DupfinderError as e:
                logger.warning(f"Not watching {path}: {e}")
                skipped.append(path)
        return registered, skipped
