"""Exceptions raised by the flights database layer."""
from __future__ import annotations


class StorageError(RuntimeError):
    """Raised when the backing store fails; the open transaction has been rolled back."""
