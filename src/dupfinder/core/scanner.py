"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements file enumeration for duplicate detection.
Features:
- Depth-first recursive traversal built on os.walk
- Directory symlinks are never followed, so link cycles cannot be entered
- File symlinks are followed when they resolve to a regular file
- Unreadable subdirectories are reported to the log sink and skipped
"""

import os
import stat
from typing import Iterator, Optional
import logging

from dupfinder.core.errors import RootUnreadable
from dupfinder.core.interfaces import FileScanner, LogSink

logger = logging.getLogger(__name__)


def error_line(path: str, reason: str) -> str:
    return f"Error processing file {path}: {reason}\r\n"


class FileScannerImpl(FileScanner):
    """
    Enumerates regular files under a root directory.

    Attributes:
        root_dir: Absolute path of the directory to scan
        follow_file_symlinks: Hash the target of links that resolve to regular files
    """

    def __init__(self, root_dir: str, follow_file_symlinks: bool = True):
        self.root_dir = os.path.abspath(root_dir)
        self.follow_file_symlinks = follow_file_symlinks

    def scan(self, log_sink: Optional[LogSink] = None) -> Iterator[str]:
        """
        Validates the root and returns an iterator over absolute file paths.
        Raises RootUnreadable when the root cannot be traversed at all.
        """
        logger.debug(f"Root directory: {self.root_dir}")
        self._check_root()
        return self._walk(log_sink)

    def _check_root(self) -> None:
        if not os.path.exists(self.root_dir):
            error_msg = "directory does not exist"
            logger.error(f"Cannot scan {self.root_dir}: {error_msg}")
            raise RootUnreadable(self.root_dir, error_msg)
        if not os.path.isdir(self.root_dir):
            error_msg = "not a directory"
            logger.error(f"Cannot scan {self.root_dir}: {error_msg}")
            raise RootUnreadable(self.root_dir, error_msg)
        try:
            with os.scandir(self.root_dir):
                pass
        except OSError as e:
            logger.error(f"Cannot scan {self.root_dir}: {e}")
            raise RootUnreadable(self.root_dir, str(e)) from e

    def _walk(self, log_sink: Optional[LogSink]) -> Iterator[str]:
        def on_error(error: OSError):
            path = error.filename or self.root_dir
            logger.warning(f"Skipping unreadable directory {path}: {error}")
            if log_sink:
                log_sink(error_line(path, str(error)))

        processed_files = 0
        for root, dirs, files in os.walk(self.root_dir, onerror=on_error, followlinks=False):
            # Sorted so discovery order is reproducible between runs
            dirs.sort()
            for filename in sorted(files):
                path = os.path.join(root, filename)
                if self._is_regular_file(path):
                    processed_files += 1
                    yield path

        logger.debug(f"Scan completed. Found {processed_files} regular files.")

    def _is_regular_file(self, path: str) -> bool:
        """Checks link policy and file type. Returns False for anything that must not be hashed."""
        try:
            if os.path.islink(path):
                if not self.follow_file_symlinks:
                    logger.debug(f"Skipping symbolic link: {path}")
                    return False
                st = os.stat(path)
            else:
                st = os.lstat(path)
        except OSError as e:
            logger.debug(f"Skipping {path}: {e}")
            return False

        if not stat.S_ISREG(st.st_mode):
            logger.debug(f"Skipping non-regular file: {path}")
            return False
        return True
