from vdesk.crud.base import DocumentStore, StoreError, StoreErrorReason
from vdesk.crud.memory import MemoryItemCRUD

__all__ = ["DocumentStore", "StoreError", "StoreErrorReason", "MemoryItemCRUD"]
