"""
Persistence for booking entities.

DataService works over any RecordStore. Use factory.open_record_store to
get the configured backend.
"""

from .base import RecordStore, StoreError
from .data_service import DataService
from .local import LocalMirrorStore

__all__ = ["RecordStore", "StoreError", "DataService", "LocalMirrorStore"]
