"""
Qt integration — runs scans on a QThreadPool thread and marshals watcher events to the UI thread.
Signals emitted from worker or watcher threads reach UI slots through queued connections.
"""
from PySide6.QtCore import QRunnable, QObject, Signal, QMutex, QMutexLocker
from dupfinder.core.models import ScanParams
from dupfinder.core.watcher import FileWatcher
from dupfinder.commands import DuplicateScanCommand


class WorkerSignals(QObject):
    """Separate QObject to hold signals (QRunnable cannot emit signals directly)."""
    log = Signal(str)             # one scan log line
    finished = Signal(object)     # ScanResult
    error = Signal(str)


class ScanWorker(QRunnable):
    """
    Worker runnable that performs a scan in the thread pool.
    A scan always runs to completion; stop() only silences the signals.
    """
    def __init__(self, params: ScanParams):
        super().__init__()
        self.params = params
        self.command = DuplicateScanCommand()
        self.signals = WorkerSignals()
        self._stopped = False
        self._mutex = QMutex()
        self.setAutoDelete(True)  # Critical: auto-delete after run() completes

    def stop(self):
        """Sets the stopped flag so no further signals are emitted."""
        with QMutexLocker(self._mutex):
            self._stopped = True

    def is_stopped(self) -> bool:
        """Returns True if the worker has been requested to stop."""
        with QMutexLocker(self._mutex):
            return self._stopped

    def safe_log_emit(self, line: str):
        """Log sink handed to the scanner; emits with mutex protection."""
        with QMutexLocker(self._mutex):
            if not self._stopped:
                try:
                    self.signals.log.emit(line)
                except RuntimeError:
                    pass

    def run(self):
        """Main execution method. Runs in thread pool thread."""
        try:
            if self.is_stopped():
                return

            result = self.command.execute(self.params, log_sink=self.safe_log_emit)

            if not self.is_stopped():
                self.signals.finished.emit(result)
        except Exception as e:
            if not self.is_stopped():
                self.signals.error.emit(f"{type(e).__name__}: {str(e)}")


class WatcherBridge(QObject):
    """
    Adapts FileWatcher callbacks to Qt signals.

    Signals:
        file_disappeared (str): A watched file is confirmed gone.
        log (str): A watcher log line (e.g. a torn-down directory watch).
    """
    file_disappeared = Signal(str)
    log = Signal(str)

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self.watcher = FileWatcher(log_sink=self.log.emit)
        self.watcher.set_callback(self.file_disappeared.emit)

    def start(self):
        self.watcher.start()

    def stop(self):
        self.watcher.stop()
