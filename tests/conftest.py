"""
Shared fixtures for duplicate finder tests.
Creates isolated temporary directories with controlled test files.
"""
import hashlib
import threading
import pytest
import tempfile
from pathlib import Path
from typing import Dict, List


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate scenarios:
    - 3 identical files (1KB of 'A'), one of them in a subdirectory
    - 2 identical files (2KB of 'B')
    - 2 unique files (different content, same size as a duplicate pair)
    """
    files = {}

    # Duplicate class #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate class #2 (2KB of 'B')
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.bin"
    files["dup2_b"] = temp_dir / "dup2_b.bin"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Unique files: same size as class #1 but different content
    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1024)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"A" * 1023 + b"Z")

    # Subdirectory with duplicates
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)  # Same as dup1_a/b

    return files


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class LogCollector:
    """Thread-safe log sink recording every line it receives."""

    def __init__(self):
        self.lines: List[str] = []
        self._lock = threading.Lock()

    def __call__(self, line: str) -> None:
        with self._lock:
            self.lines.append(line)

    def matching(self, prefix: str) -> List[str]:
        with self._lock:
            return [line for line in self.lines if line.startswith(prefix)]


@pytest.fixture
def log_sink() -> LogCollector:
    return LogCollector()
