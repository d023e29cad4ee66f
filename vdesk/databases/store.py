from typing import Optional

from vdesk.configs.settings import settings
from vdesk.core.exceptions import TransientError
from vdesk.crud.base import DocumentStore
from vdesk.utils.logging import get_logger

logger = get_logger(__name__)

_store: Optional[DocumentStore] = None


async def init_store(backend: Optional[str] = None) -> DocumentStore:
    """Open the configured document store and make it the active one"""
    global _store
    backend = backend or settings.STORE_BACKEND

    if backend == "memory":
        from vdesk.crud.memory import MemoryItemCRUD
        _store = MemoryItemCRUD()
        logger.warning("Using in-memory document store - data is lost on restart")
    else:
        from vdesk.databases.mongodb import mongodb
        from vdesk.crud.item import ItemCRUD
        from vdesk.models import DOCUMENT_MODELS
        await mongodb.connect(document_models=DOCUMENT_MODELS)
        _store = ItemCRUD()
        logger.info("MongoDB document store ready")
    return _store


def get_store() -> DocumentStore:
    if _store is None:
        raise TransientError("Document store is not initialized")
    return _store


async def close_store() -> None:
    global _store
    if _store is None:
        return
    await _store.close()
    if settings.STORE_BACKEND == "mongo":
        from vdesk.databases.mongodb import mongodb
        await mongodb.disconnect()
    _store = None
