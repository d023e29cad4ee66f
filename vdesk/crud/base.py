from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from vdesk.consts.item_kind import ItemKind
from vdesk.schemas.item import ItemPatch

# Fields a patch may never overwrite
SYSTEM_FIELDS = frozenset({"id", "_id", "kind", "created_at", "revision_id"})


class StoreErrorReason(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TRANSIENT = "transient"


class StoreError(Exception):
    def __init__(self, reason: StoreErrorReason, message: str = ""):
        super().__init__(message or reason.value)
        self.reason = reason
        self.message = message or reason.value

    @property
    def not_found(self) -> bool:
        return self.reason == StoreErrorReason.NOT_FOUND


def partition_candidates(id: str, partition_hint: Optional[ItemKind] = None) -> List[ItemKind]:
    """Partitions to probe, in order, when locating a document.

    An explicit hint is trusted and searched alone. Otherwise the id prefix
    picks the first candidate and the other partition is the fallback.
    """
    if partition_hint is not None:
        return [ItemKind(partition_hint)]
    guess = ItemKind.FILE if id.startswith(ItemKind.FILE.id_prefix) else ItemKind.FOLDER
    return [guess, guess.other]


def matches(doc: Mapping[str, Any], predicate: Mapping[str, Any]) -> bool:
    """Evaluate an equality / ``$in`` predicate against a plain document.

    ``None`` matches both an explicit null and a missing field, as in MongoDB.
    """
    for field, expected in predicate.items():
        actual = doc.get(field)
        if isinstance(expected, Mapping):
            if "$in" not in expected:
                raise ValueError(f"Unsupported operator in predicate: {expected}")
            if actual not in expected["$in"]:
                return False
        elif actual != expected:
            return False
    return True


class DocumentStore(ABC):
    """Partitioned document collection keyed by id, partitioned by kind.

    Documents cross this boundary as plain dicts with snake_case keys.
    """

    @abstractmethod
    async def create(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def get_by_id(self, id: str, partition_hint: Optional[ItemKind] = None) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def update(
        self, id: str, patch: ItemPatch, partition_hint: Optional[ItemKind] = None
    ) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def delete(self, id: str, partition_hint: Optional[ItemKind] = None) -> None:
        ...

    @abstractmethod
    async def query_all(self, predicate: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        ...

    async def close(self) -> None:
        return None

    @staticmethod
    def _patch_data(patch: ItemPatch) -> Dict[str, Any]:
        return {k: v for k, v in patch.as_update().items() if k not in SYSTEM_FIELDS}
