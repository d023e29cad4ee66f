import copy
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from vdesk.consts.item_kind import ItemKind
from vdesk.crud.base import DocumentStore, StoreError, StoreErrorReason, matches, partition_candidates
from vdesk.schemas.item import ItemPatch
from vdesk.utils import get_logger

logger = get_logger(__name__)


class MemoryItemCRUD(DocumentStore):
    """Process-local document store, one dict per partition.

    Used for local development (STORE_BACKEND=memory) and the test suite.
    Every call returns copies, so callers never alias stored state.
    """

    def __init__(self):
        self._partitions: Dict[ItemKind, Dict[str, Dict[str, Any]]] = {kind: {} for kind in ItemKind}

    async def create(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        kind = ItemKind(doc["kind"])
        if any(doc["id"] in partition for partition in self._partitions.values()):
            raise StoreError(StoreErrorReason.CONFLICT, f"Item {doc['id']} already exists")

        now = datetime.utcnow()
        stored = copy.deepcopy(dict(doc))
        stored["kind"] = kind
        stored.setdefault("created_at", now)
        stored.setdefault("updated_at", stored["created_at"])
        self._partitions[kind][stored["id"]] = stored
        return copy.deepcopy(stored)

    def _locate(self, id: str, partition_hint: Optional[ItemKind]) -> Dict[str, Any]:
        for kind in partition_candidates(id, partition_hint):
            doc = self._partitions[kind].get(id)
            if doc is not None:
                return doc
            logger.debug(f"Item {id} not in partition '{kind.value}'")
        raise StoreError(StoreErrorReason.NOT_FOUND, f"Item {id} not found")

    async def get_by_id(self, id: str, partition_hint: Optional[ItemKind] = None) -> Dict[str, Any]:
        return copy.deepcopy(self._locate(id, partition_hint))

    async def update(
        self, id: str, patch: ItemPatch, partition_hint: Optional[ItemKind] = None
    ) -> Dict[str, Any]:
        current = self._locate(id, partition_hint)
        updated = dict(current)
        updated.update(copy.deepcopy(self._patch_data(patch)))
        updated["updated_at"] = datetime.utcnow()
        self._partitions[updated["kind"]][id] = updated
        return copy.deepcopy(updated)

    async def delete(self, id: str, partition_hint: Optional[ItemKind] = None) -> None:
        doc = self._locate(id, partition_hint)
        del self._partitions[doc["kind"]][id]

    async def query_all(self, predicate: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        predicate = predicate or {}
        return [
            copy.deepcopy(doc)
            for partition in self._partitions.values()
            for doc in partition.values()
            if matches(doc, predicate)
        ]

    async def close(self) -> None:
        for partition in self._partitions.values():
            partition.clear()
