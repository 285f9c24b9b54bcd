"""Entity store and the storage backends it persists through."""

from rentdesk.store.backends import JsonFileBackend, MemoryBackend, StorageBackend
from rentdesk.store.entity_store import Collection, EntityStore

__all__ = ["Collection", "EntityStore", "JsonFileBackend", "MemoryBackend", "StorageBackend"]
