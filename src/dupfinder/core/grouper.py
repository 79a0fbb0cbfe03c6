"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Implements content-digest grouping of files using an injected Hasher.
"""

from typing import Iterable, List, Dict, Optional
from collections import defaultdict
import logging

from dupfinder.core.errors import FileUnreadable
from dupfinder.core.interfaces import FileGrouper, Hasher, LogSink
from dupfinder.core.hasher import HasherImpl
from dupfinder.core.scanner import error_line

logger = logging.getLogger(__name__)


def hashed_line(path: str) -> str:
    return f"Hashing completed: {path}\r\n"


class FileGrouperImpl(FileGrouper):
    """
    A concrete implementation of FileGrouper using SHA-256 digests.
    Uses an injected Hasher instance for flexibility and testability.
    """

    def __init__(self, hasher: Hasher = None):
        self.hasher = hasher or HasherImpl()

    def group_by_full_hash(
        self,
        paths: Iterable[str],
        log_sink: Optional[LogSink] = None
    ) -> Dict[str, List[str]]:
        """
        Groups files by full content digest.
        Files that cannot be read are logged and left out.
        Returns:
            Dict[digest, List[path]] with two or more paths per digest, in discovery order
        """
        groups = defaultdict(list)
        skipped_files = 0
        for path in paths:
            try:
                digest = self.hasher.compute_full_hash(path)
            except FileUnreadable as e:
                skipped_files += 1
                if log_sink:
                    log_sink(error_line(path, e.reason))
                continue

            groups[digest].append(path)
            if log_sink:
                log_sink(hashed_line(path))

        if skipped_files > 0:
            logger.warning(f"Skipped {skipped_files} files due to read errors")

        # Avoid groups with less than 2 files
        return {digest: group for digest, group in groups.items() if len(group) >= 2}
