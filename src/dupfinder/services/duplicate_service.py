from typing import Iterable
from dupfinder.core.models import DuplicateClass, ScanResult


class DuplicateService:
    @staticmethod
    def remove_paths(result: ScanResult, paths: Iterable[str]) -> ScanResult:
        """
        Removes the specified paths from all duplicate classes.

        Classes that contain fewer than 2 paths after removal are discarded.

        Args:
            result (ScanResult): Result set to update.
            paths (Iterable[str]): Paths of files that no longer exist.

        Returns:
            ScanResult: A new result set; the input is left untouched.
        """
        gone = set(paths)
        updated = {}
        for digest, dup in result.classes.items():
            remaining = tuple(p for p in dup.paths if p not in gone)
            if len(remaining) >= 2:
                updated[digest] = dup if len(remaining) == len(dup.paths) else \
                    DuplicateClass(digest=digest, paths=remaining)
        return ScanResult(updated)

    @staticmethod
    def remove_path(result: ScanResult, path: str) -> ScanResult:
        """Shortcut for a single disappearance reported by the watcher."""
        return DuplicateService.remove_paths(result, [path])
