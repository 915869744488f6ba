"""Database readers and writers."""

from pickem_sync.storage.readers import PickemReader, PickRecord
from pickem_sync.storage.writers import PickemWriter

__all__ = ["PickemReader", "PickRecord", "PickemWriter"]
