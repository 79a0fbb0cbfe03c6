"""Result-set maintenance services."""

from .duplicate_service import DuplicateService

__all__ = ["DuplicateService"]
