"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements file hashing using pluggable incremental hash algorithms.

HasherImpl streams a file through a fresh hash state in fixed-size chunks,
so memory use is bounded by the chunk buffer no matter how large the file is.
"""

import hashlib
import logging

from dupfinder.core.errors import FileUnreadable
from dupfinder.core.interfaces import HashAlgorithm, HashState
from dupfinder.core.models import HashConfig

logger = logging.getLogger(__name__)


# Use the same way to implement and use any other hashing algorithm
class Sha256AlgorithmImpl(HashAlgorithm):
    name = "sha256"

    def new(self) -> HashState:
        return hashlib.sha256()


class HasherImpl:
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Computes the digest of the complete byte stream of a file.
    """

    def __init__(self, algorithm: HashAlgorithm = None, chunk_size: int = HashConfig.CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.algorithm = algorithm or Sha256AlgorithmImpl()
        self.chunk_size = chunk_size

    def compute_full_hash(self, path: str) -> str:
        """
        Returns the lowercase hex digest of the file at `path`.
        Raises FileUnreadable if the file cannot be opened or read to the end.
        """
        state = self.algorithm.new()
        total_read = 0
        try:
            with open(path, 'rb') as f:
                while True:
                    chunk = f.read(self.chunk_size)
                    if not chunk:
                        break
                    state.update(chunk)
                    total_read += len(chunk)
        except OSError as e:
            logger.debug(f"Failed to read {path} after {total_read} bytes: {e}")
            raise FileUnreadable(path, str(e)) from e

        digest = state.hexdigest()
        logger.debug(f"{self.algorithm.name}({path}) = {digest} ({total_read} bytes)")
        return digest
