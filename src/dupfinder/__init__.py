"""
dupfinder — finds byte-identical duplicate files and keeps the result set in sync with the disk.

Core features:
- Recursive scan grouping files by SHA-256 of their full content
- Live watcher reporting when previously reported files disappear
- CLI interface for headless usage
- Optional Qt adapters with PySide6 (install with [gui] extra)
"""

from importlib.metadata import version as _version, PackageNotFoundError

try:
    __version__ = _version("dupfinder")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from dupfinder.commands import DuplicateScanCommand
from dupfinder.core import (
    scan, FileWatcher, ScanParams, ScanResult, DuplicateClass,
    DupfinderError, RootUnreadable, NotARegularFile, WatchSetupFailed)
from dupfinder.services import DuplicateService
from dupfinder.utils.convert_utils import ConvertUtils

__all__ = [
    "DuplicateScanCommand",
    "scan",
    "FileWatcher",
    "ScanParams",
    "ScanResult",
    "DuplicateClass",
    "DupfinderError",
    "RootUnreadable",
    "NotARegularFile",
    "WatchSetupFailed",
    "DuplicateService",
    "ConvertUtils",
    "__version__",
]
