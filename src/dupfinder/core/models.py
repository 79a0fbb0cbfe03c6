"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for duplicate detection and for the watch registry.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Tuple, Iterator, Optional, Any
import os
from enum import Enum


# =============================
# Configuration
# =============================

class HashConfig:
    CHUNK_SIZE = 8 * 1024  # Bytes read per update of the incremental hasher
    DIGEST_HEX_LENGTH = 64  # SHA-256 as lowercase hex


@dataclass
class ScanParams:
    """Parameters for one scan with built-in validation."""
    root_dir: str
    chunk_size: int = HashConfig.CHUNK_SIZE
    follow_file_symlinks: bool = True

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if self.chunk_size <= 0:
            raise ValueError("Chunk size must be positive")

        self.root_dir = os.path.abspath(self.root_dir)


# ======================
#  Scan results
# ======================

@dataclass(frozen=True)
class DuplicateClass:
    """
    Files sharing one content digest.
    Paths are kept in the order the scanner discovered them.
    """
    digest: str
    paths: Tuple[str, ...]

    def __post_init__(self):
        if len(self.digest) != HashConfig.DIGEST_HEX_LENGTH:
            raise ValueError(f"Digest must be {HashConfig.DIGEST_HEX_LENGTH} hex characters")
        if len(self.paths) < 2:
            raise ValueError("A duplicate class needs at least two paths")

    @property
    def duplicate_count(self) -> int:
        return len(self.paths)

    def file_size(self) -> int:
        """Size of one member, 0 if every member is gone."""
        for path in self.paths:
            try:
                return os.stat(path).st_size
            except OSError:
                continue
        return 0

    def __repr__(self):
        return f"<DuplicateClass digest={self.digest[:12]}, count={len(self.paths)}>"


@dataclass
class ScanResult:
    """
    Every duplicate class found by one scan, keyed by digest.
    Singletons are never stored.
    """
    classes: Dict[str, DuplicateClass] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Dict[str, List[str]]) -> 'ScanResult':
        return cls({
            digest: DuplicateClass(digest=digest, paths=tuple(paths))
            for digest, paths in mapping.items()
            if len(paths) >= 2
        })

    def as_dict(self) -> Dict[str, List[str]]:
        return {digest: list(dup.paths) for digest, dup in self.classes.items()}

    def paths(self) -> Iterator[str]:
        for dup in self.classes.values():
            yield from dup.paths

    def find(self, path: str) -> Optional[DuplicateClass]:
        for dup in self.classes.values():
            if path in dup.paths:
                return dup
        return None

    @property
    def duplicate_count(self) -> int:
        """How many files take part in some duplicate class."""
        return sum(dup.duplicate_count for dup in self.classes.values())

    def wasted_bytes(self) -> int:
        """Bytes that could be reclaimed by keeping one file per class."""
        return sum(dup.file_size() * (dup.duplicate_count - 1) for dup in self.classes.values())

    def __len__(self):
        return len(self.classes)

    def __iter__(self):
        return iter(self.classes.values())

    def __contains__(self, digest):
        return digest in self.classes

    def __getitem__(self, digest) -> DuplicateClass:
        return self.classes[digest]


# ======================
#  Watch registry
# ======================

class WatchAction(str, Enum):
    REMOVED = "removed"
    RENAMED_OLD = "renamed-old"
    DIRECTORY_LOST = "directory-lost"


@dataclass(frozen=True)
class WatchEvent:
    """One change record copied out of a notification batch."""
    directory: str
    action: WatchAction
    name: str
    dest_name: Optional[str] = None

    @property
    def is_disappearance(self) -> bool:
        return self.action in (WatchAction.REMOVED, WatchAction.RENAMED_OLD)


@dataclass
class DirectoryEntry:
    """
    Registry record for one observed directory.
    The entry owns the OS watch handle and the ordered list of watched leaf names.
    """
    directory: str
    watch: Any
    filenames: List[str] = field(default_factory=list)

    def add(self, name: str) -> bool:
        """Appends a leaf name unless it is already watched."""
        if name in self.filenames:
            return False
        self.filenames.append(name)
        return True

    def discard(self, name: str) -> bool:
        try:
            self.filenames.remove(name)
        except ValueError:
            return False
        return True

    @property
    def is_empty(self) -> bool:
        return not self.filenames

    def __repr__(self):
        return f"<DirectoryEntry directory={self.directory}, files={len(self.filenames)}>"
