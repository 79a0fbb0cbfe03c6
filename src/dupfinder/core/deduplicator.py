"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/deduplicator.py
Duplicate-detection engine: enumerate, hash, group, prune.

The scan runs to completion on the caller's thread. It spawns no workers and
only blocks on directory listing, file opens and chunk reads.
"""

import time
import logging
from typing import Dict, List, Optional

from dupfinder.core.grouper import FileGrouperImpl
from dupfinder.core.hasher import HasherImpl
from dupfinder.core.interfaces import FileGrouper, LogSink
from dupfinder.core.models import ScanParams, ScanResult
from dupfinder.core.scanner import FileScannerImpl

logger = logging.getLogger(__name__)


class DeduplicatorImpl:
    """Finds byte-identical files under a root directory."""

    def __init__(self, grouper: Optional[FileGrouper] = None):
        self._grouper = grouper

    def find_duplicates(self, params: ScanParams, log_sink: Optional[LogSink] = None) -> ScanResult:
        """
        Scan `params.root_dir` and return its duplicate classes.

        Raises:
            RootUnreadable: If the root cannot be traversed at all
        """
        start_time = time.time()
        scanner = FileScannerImpl(params.root_dir, follow_file_symlinks=params.follow_file_symlinks)
        grouper = self._grouper or FileGrouperImpl(HasherImpl(chunk_size=params.chunk_size))

        paths = scanner.scan(log_sink)
        groups = grouper.group_by_full_hash(paths, log_sink)
        result = ScanResult.from_mapping(groups)

        logger.debug(
            f"Found {len(result)} duplicate classes ({result.duplicate_count} files) "
            f"in {time.time() - start_time:.2f} seconds"
        )
        return result


def scan(root: str, log_sink: Optional[LogSink] = None) -> Dict[str, List[str]]:
    """
    Returns {digest: [paths...]} for every group of two or more identical files under `root`.
    """
    return DeduplicatorImpl().find_duplicates(ScanParams(root_dir=root), log_sink).as_dict()
