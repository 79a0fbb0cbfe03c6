"""
Core duplicate-detection engine and live filesystem observer.

This package contains the non-UI foundation of dupfinder:
- FileScannerImpl: recursive directory traversal with a file-only symlink policy
- HasherImpl + Sha256AlgorithmImpl: streaming SHA-256 content digests
- FileGrouperImpl: digest grouping with singleton pruning
- DeduplicatorImpl / scan: the scan entry points
- FileWatcher: per-directory watch registry reporting disappearing files
- Models and errors shared by all of the above

All components are pure Python with no GUI dependencies — suitable for CLI and server usage.
"""

from .scanner import FileScannerImpl
from .grouper import FileGrouperImpl
from .hasher import HasherImpl, Sha256AlgorithmImpl
from .deduplicator import DeduplicatorImpl, scan
from .watcher import FileWatcher
from .models import (
    DuplicateClass, ScanResult, ScanParams, HashConfig,
    DirectoryEntry, WatchAction, WatchEvent)
from .errors import (
    DupfinderError, RootUnreadable, FileUnreadable, NotARegularFile,
    WatchSetupFailed, WatchReArmFailed, CompletionLoopFailed)

__all__ = [
    "FileScannerImpl",
    "FileGrouperImpl",
    "HasherImpl",
    "Sha256AlgorithmImpl",
    "DeduplicatorImpl",
    "scan",
    "FileWatcher",
    "DuplicateClass",
    "ScanResult",
    "ScanParams",
    "HashConfig",
    "DirectoryEntry",
    "WatchAction",
    "WatchEvent",
    "DupfinderError",
    "RootUnreadable",
    "FileUnreadable",
    "NotARegularFile",
    "WatchSetupFailed",
    "WatchReArmFailed",
    "CompletionLoopFailed",
]
