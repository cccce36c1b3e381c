from .backends import InMemoryBackend, JsonFileBackend
from .config import get_app_config, open_store, store_path

__all__ = ["InMemoryBackend", "JsonFileBackend", "get_app_config", "open_store", "store_path"]
