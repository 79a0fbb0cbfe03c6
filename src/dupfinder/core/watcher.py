"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/watcher.py
Keeps reported duplicates in sync with the filesystem.

FileWatcher groups watched files by parent directory and schedules one
non-recursive watchdog watch per directory. Change records are snapshotted on
the observer thread and posted to a completion queue; a single completion
thread drains that queue in batches, confirms each disappearance with an
attribute query and hands the full path to the disappearance callback.
When the queue stays idle the same thread re-checks every watch, which catches
a watched directory that was renamed away without a record.

REGISTRY
--------
directory -> DirectoryEntry(watch handle, ordered leaf names)
  • an entry exists iff it has at least one leaf name
  • the watch is scheduled iff the entry exists
  • completions look entries up by directory key, never by reference

LOCKING
-------
One re-entrant lock guards the registry. add_file() takes it from any thread;
the completion thread takes it while applying one directory's batch.
Callbacks are invoked after the lock is released.
"""

import os
import stat
import queue
import logging
import threading
from typing import Callable, Dict, List, Optional

from watchdog.events import (
    DirDeletedEvent, DirMovedEvent, FileDeletedEvent, FileMovedEvent,
    FileSystemEvent, FileSystemEventHandler, FileSystemMovedEvent,
)
from watchdog.observers import Observer

from dupfinder.core.errors import (
    CompletionLoopFailed, NotARegularFile, WatchReArmFailed, WatchSetupFailed,
)
from dupfinder.core.interfaces import DisappearanceCallback, LogSink
from dupfinder.core.models import DirectoryEntry, WatchAction, WatchEvent

logger = logging.getLogger(__name__)

_SHUTDOWN = object()

# Filename-change events only; content and attribute changes never reach the handler
WATCHED_EVENTS = [FileDeletedEvent, FileMovedEvent, DirDeletedEvent, DirMovedEvent]


class DirectoryEventHandler(FileSystemEventHandler):
    """
    Forwards filename changes of one directory to the completion queue.
    Only deletions and renames are of interest; every other event is ignored.
    """

    def __init__(self, directory: str, completions: queue.Queue):
        super().__init__()
        self.directory = directory
        self._completions = completions

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._post(event, WatchAction.REMOVED)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._post(event, WatchAction.RENAMED_OLD)

    def _post(self, event: FileSystemEvent, action: WatchAction) -> None:
        src_path = os.path.normpath(os.fsdecode(event.src_path))

        if event.is_directory:
            # The watched directory itself went away; subdirectories are not watched
            if src_path == self.directory:
                self._completions.put(WatchEvent(self.directory, WatchAction.DIRECTORY_LOST, ""))
            return

        dest_name = None
        if isinstance(event, FileSystemMovedEvent) and event.dest_path:
            dest_name = os.path.basename(os.fsdecode(event.dest_path))

        self._completions.put(
            WatchEvent(self.directory, action, os.path.basename(src_path), dest_name)
        )


class FileWatcher:
    """
    Registry of watched files plus the completion loop that reports their disappearance.

    Usage:
        watcher = FileWatcher(log_sink=print)
        watcher.set_callback(on_gone)
        watcher.start()
        for path in result.paths():
            watcher.add_file(path)
        ...
        watcher.stop()
    """

    IDLE_CHECK_INTERVAL = 1.0  # seconds without records before every watch is re-checked

    def __init__(self, log_sink: Optional[LogSink] = None, observer=None):
        self._log_sink = log_sink
        self._observer = observer if observer is not None else Observer()
        self._callback: Optional[DisappearanceCallback] = None
        self._directories: Dict[str, DirectoryEntry] = {}
        self._lock = threading.RLock()
        self._completions: queue.Queue = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    # =============================
    # Public API
    # =============================

    def set_callback(self, callback: Callable[[str], None]) -> None:
        """Installs the capability invoked once per confirmed disappearance."""
        self._callback = callback

    def add_file(self, path: str) -> None:
        """
        Registers interest in a regular file.

        Raises:
            NotARegularFile: If `path` is not currently a regular file
            WatchSetupFailed: If the directory watch cannot be armed
        """
        path = os.path.abspath(path)
        try:
            st = os.stat(path)
        except OSError as e:
            logger.debug(f"Cannot watch {path}: {e}")
            raise NotARegularFile(path) from e
        if not stat.S_ISREG(st.st_mode):
            raise NotARegularFile(path)

        directory, name = os.path.split(path)

        with self._lock:
            entry = self._directories.get(directory)
            if entry is not None:
                if entry.add(name):
                    logger.debug(f"Watching {name} in {directory} ({len(entry.filenames)} files)")
                else:
                    logger.debug(f"Already watching {path}")
                return

            handler = DirectoryEventHandler(directory, self._completions)
            try:
                watch = self._observer.schedule(
                    handler, directory, recursive=False, event_filter=WATCHED_EVENTS)
            except OSError as e:
                logger.error(f"Failed to watch directory {directory}: {e}")
                raise WatchSetupFailed(directory, str(e)) from e

            self._directories[directory] = DirectoryEntry(directory, watch, [name])
            logger.debug(f"Armed watch on {directory} for {name}")

    def start(self) -> None:
        """Starts the observer and the dedicated completion thread."""
        if self._thread is not None:
            raise RuntimeError("Watcher already started")

        self._start_observer()
        self._thread = threading.Thread(target=self.run, name="dupfinder-watcher", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stops the completion thread and closes every watch.
        Records already queued are applied first; anything arriving later is dropped.
        """
        if self._thread is not None:
            self.request_shutdown()
            self._thread.join(timeout)
            self._thread = None

        with self._lock:
            for entry in list(self._directories.values()):
                self._teardown(entry)

        if self._observer.is_alive():
            self._observer.stop()
            self._observer.join()

    def request_shutdown(self) -> None:
        """Asks run() to return after the completions queued so far."""
        self._completions.put(_SHUTDOWN)

    def run(self) -> None:
        """
        Completion loop. Blocks until a batch of change records arrives,
        applies it, and repeats until shutdown is requested. When no records
        arrive for IDLE_CHECK_INTERVAL seconds every watch is re-checked.

        Raises:
            CompletionLoopFailed: If the loop machinery itself fails
        """
        self._start_observer()
        logger.debug("Completion loop started")

        while True:
            try:
                batch, shutdown = self._next_batch()
                for directory, events in self._group_by_directory(batch).items():
                    for path in self._apply(directory, events):
                        self._notify(path)
                if not batch and not shutdown:
                    self.check_watches()
            except Exception as e:
                logger.exception("Completion loop failed")
                raise CompletionLoopFailed(str(e)) from e

            if shutdown:
                logger.debug("Completion loop stopped")
                return

    # =============================
    # Registry snapshots
    # =============================

    def watched_directories(self) -> List[str]:
        with self._lock:
            return list(self._directories)

    def watched_files(self, directory: str) -> List[str]:
        with self._lock:
            entry = self._directories.get(os.path.abspath(directory))
            return list(entry.filenames) if entry else []

    def is_watching(self, path: str) -> bool:
        directory, name = os.path.split(os.path.abspath(path))
        return name in self.watched_files(directory)

    def check_watches(self) -> None:
        """
        Re-checks every directory watch. A directory renamed or removed without
        a record reaching its handler is torn down and logged here.
        """
        with self._lock:
            for entry in list(self._directories.values()):
                self._rearm_or_teardown(entry)

    # =============================
    # Completion handling
    # =============================

    def _start_observer(self) -> None:
        if not self._observer.is_alive():
            self._observer.start()

    def _next_batch(self):
        """
        Waits for one record, then takes everything already queued behind it.
        Returns an empty batch when the idle interval passes without records.
        """
        batch = []
        try:
            item = self._completions.get(timeout=self.IDLE_CHECK_INTERVAL)
        except queue.Empty:
            return batch, False
        while True:
            if item is _SHUTDOWN:
                return batch, True
            batch.append(item)
            try:
                item = self._completions.get_nowait()
            except queue.Empty:
                return batch, False

    @staticmethod
    def _group_by_directory(batch: List[WatchEvent]) -> Dict[str, List[WatchEvent]]:
        grouped: Dict[str, List[WatchEvent]] = {}
        for event in batch:
            grouped.setdefault(event.directory, []).append(event)
        return grouped

    def _apply(self, directory: str, events: List[WatchEvent]) -> List[str]:
        """
        Applies one directory's records to its entry and re-arms it.
        Returns the full paths confirmed gone, in reported order.
        """
        gone = []
        with self._lock:
            entry = self._directories.get(directory)
            if entry is None:
                logger.debug(f"Dropping {len(events)} records for unwatched directory {directory}")
                return gone

            lost_reason = None
            for event in events:
                if event.action is WatchAction.DIRECTORY_LOST:
                    lost_reason = "directory was removed or renamed"
                    continue
                if not event.is_disappearance or event.name not in entry.filenames:
                    continue

                path = os.path.join(directory, event.name)
                if not self._confirm_gone(path):
                    continue

                entry.discard(event.name)
                gone.append(path)
                if event.dest_name:
                    logger.debug(f"{path} renamed to {event.dest_name}")

                if entry.is_empty:
                    logger.debug(f"No watched files left in {directory}")
                    self._teardown(entry)
                    return gone

            self._rearm_or_teardown(entry, lost_reason)

        return gone

    def _rearm_or_teardown(self, entry: DirectoryEntry, lost_reason: Optional[str] = None) -> None:
        """Caller holds the lock."""
        try:
            self._rearm(entry, lost_reason)
        except WatchReArmFailed as e:
            logger.error(str(e))
            self._teardown(entry)
            if self._log_sink:
                self._log_sink(f"{e}\r\n")

    @staticmethod
    def _confirm_gone(path: str) -> bool:
        try:
            os.stat(path)
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.debug(f"Cannot confirm disappearance of {path}: {e}")
            return False
        return False

    def _rearm(self, entry: DirectoryEntry, lost_reason: Optional[str]) -> None:
        """Checks that the watch behind `entry` still delivers notifications."""
        if lost_reason:
            raise WatchReArmFailed(entry.directory, lost_reason)
        if not os.path.isdir(entry.directory):
            raise WatchReArmFailed(entry.directory, "directory no longer exists")

        for emitter in self._observer.emitters:
            if emitter.watch == entry.watch:
                if emitter.is_alive():
                    return
                break
        raise WatchReArmFailed(entry.directory, "change notification stopped")

    def _teardown(self, entry: DirectoryEntry) -> None:
        """Closes the watch and erases the entry. Caller holds the lock."""
        try:
            self._observer.unschedule(entry.watch)
        except KeyError:
            logger.debug(f"Watch on {entry.directory} was already closed")
        self._directories.pop(entry.directory, None)
        logger.debug(f"Closed watch on {entry.directory}")

    def _notify(self, path: str) -> None:
        callback = self._callback
        if callback is None:
            logger.debug(f"No callback installed, dropping disappearance of {path}")
            return
        try:
            callback(path)
        except Exception:
            logger.exception(f"Error in disappearance callback for {path}")
