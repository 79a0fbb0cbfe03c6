"""Qt adapters for the core (install with the [gui] extra)."""

from .worker import ScanWorker, WorkerSignals, WatcherBridge

__all__ = ["ScanWorker", "WorkerSignals", "WatcherBridge"]
