from .backends import JsonFileStorage, KeyValueStorage, MemoryStorage, SqlStorage, build_storage
from .credentials import CredentialStore

__all__ = [
    "CredentialStore",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "SqlStorage",
    "build_storage",
]
