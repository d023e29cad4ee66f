from contextlib import asynccontextmanager
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

from vdesk.consts.item_kind import ItemKind
from vdesk.crud.base import DocumentStore, StoreError, StoreErrorReason, partition_candidates
from vdesk.models.item import Item
from vdesk.schemas.item import ItemPatch
from vdesk.utils import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def _store_errors(operation: str, id: Optional[str] = None):
    try:
        yield
    except StoreError:
        raise
    except DuplicateKeyError as e:
        raise StoreError(StoreErrorReason.CONFLICT, f"Item {id} already exists") from e
    except PyMongoError as e:
        logger.error(f"MongoDB {operation} failed for {id or 'query'}: {str(e)}")
        raise StoreError(StoreErrorReason.TRANSIENT, f"Database {operation} failed") from e


def _to_mongo(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {k: _to_mongo(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_mongo(v) for v in value]
    return value


class ItemCRUD(DocumentStore):
    """MongoDB store backed by the Beanie ``Item`` document.

    The ``kind`` field plays the role of the partition key: every point
    lookup filters on ``_id`` and ``kind`` together.
    """

    def __init__(self):
        self.model = Item

    @staticmethod
    def _to_dict(doc: Item) -> Dict[str, Any]:
        return doc.model_dump(exclude={"revision_id"})

    async def _locate(self, id: str, partition_hint: Optional[ItemKind]) -> Item:
        for kind in partition_candidates(id, partition_hint):
            async with _store_errors("read", id):
                doc = await self.model.find_one({"_id": id, "kind": kind.value})
            if doc is not None:
                return doc
            logger.debug(f"Item {id} not in partition '{kind.value}'")
        raise StoreError(StoreErrorReason.NOT_FOUND, f"Item {id} not found")

    async def create(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(doc)
        now = datetime.utcnow()
        data.setdefault("created_at", now)
        data.setdefault("updated_at", data["created_at"])
        db_obj = self.model(**data)
        async with _store_errors("insert", db_obj.id):
            await db_obj.insert()
        return self._to_dict(db_obj)

    async def get_by_id(self, id: str, partition_hint: Optional[ItemKind] = None) -> Dict[str, Any]:
        return self._to_dict(await self._locate(id, partition_hint))

    async def update(
        self, id: str, patch: ItemPatch, partition_hint: Optional[ItemKind] = None
    ) -> Dict[str, Any]:
        db_obj = await self._locate(id, partition_hint)
        update_data = self._patch_data(patch)
        update_data["updated_at"] = datetime.utcnow()
        async with _store_errors("update", id):
            await db_obj.set(update_data)
        return self._to_dict(db_obj)

    async def delete(self, id: str, partition_hint: Optional[ItemKind] = None) -> None:
        db_obj = await self._locate(id, partition_hint)
        async with _store_errors("delete", id):
            await db_obj.delete()

    async def query_all(self, predicate: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        query = {("_id" if k == "id" else k): _to_mongo(v) for k, v in (predicate or {}).items()}
        async with _store_errors("query"):
            docs = await self.model.find(query).to_list()
        return [self._to_dict(doc) for doc in docs]
