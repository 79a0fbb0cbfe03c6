"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Error taxonomy shared by the scanner and the watcher.
"""

REARM_FAILED_PREFIX = "Watch re-arm failed for "


class DupfinderError(Exception):
    """Base class for all errors raised by the duplicate finder core."""


class RootUnreadable(DupfinderError):
    """The scan root does not exist, is not a directory, or cannot be listed."""

    def __init__(self, root: str, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Cannot read scan root {root}: {reason}")


class FileUnreadable(DupfinderError):
    """A single file could not be opened or fully read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(reason)


class NotARegularFile(DupfinderError, ValueError):
    """add_file() was called with a path that is not a regular file."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a regular file: {path}")


class WatchSetupFailed(DupfinderError):
    """The directory watch could not be armed. The registry is left unchanged."""

    def __init__(self, directory: str, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"Failed to watch directory {directory}: {reason}")


class WatchReArmFailed(DupfinderError):
    """A directory watch died after a completed batch; the entry is torn down."""

    def __init__(self, directory: str, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"{REARM_FAILED_PREFIX}{directory}: {reason}")


class CompletionLoopFailed(DupfinderError):
    """The watcher's completion loop itself broke. Fatal for the watcher thread."""
