"""Helper modules for the background process registry."""

from .entry_models import BackgroundProcessEntry, now_millis
from .liveness import is_process_alive
from .registry_store import RegistryFileStore

__all__ = [
    "BackgroundProcessEntry",
    "RegistryFileStore",
    "is_process_alive",
    "now_millis",
]
