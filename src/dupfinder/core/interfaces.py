"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate finder.
These protocols enforce structural typing using Python's `typing.Protocol` to keep
the scanner, hasher and grouper swappable in tests and in collaborators.

Key Components:
---------------
- LogSink: Capability receiving textual progress lines from the scanner and the watcher.
- DisappearanceCallback: Capability invoked with the path of a watched file that is gone.
- HashAlgorithm: Factory for incremental hash objects (SHA-256 by default).
- Hasher: Interface for computing the content digest of one file.
- FileScanner: Interface for enumerating regular files under a root directory.
- FileGrouper: Interface for grouping files by content digest.
"""

from typing import Protocol, Iterator, Dict, List, Optional, Callable

LogSink = Callable[[str], None]
DisappearanceCallback = Callable[[str], None]


class HashState(Protocol):
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for incremental hash algorithms.

    A fresh state is created for every file, fed chunk by chunk,
    and finalised into a lowercase hex digest.
    """
    name: str

    def new(self) -> HashState:
        """Returns a new, empty incremental hash state."""
        ...


class Hasher(Protocol):
    """Interface for hashing the full content of a file."""
    def compute_full_hash(self, path: str) -> str: ...


class FileScanner(Protocol):
    """
    Interface for enumerating files to hash.

    Methods:
        scan: Yields absolute paths of regular files in discovery order.
    """
    def scan(self, log_sink: Optional[LogSink] = None) -> Iterator[str]:
        ...


class FileGrouper(Protocol):
    """
    Interface for grouping files by their full content digest.

    Returns only groups with two or more members.
    """
    def group_by_full_hash(
        self,
        paths: Iterator[str],
        log_sink: Optional[LogSink] = None
    ) -> Dict[str, List[str]]:
        ...
