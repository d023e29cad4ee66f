import base64
from typing import List, Optional, Set, Union

from vdesk.consts.item_kind import ItemKind
from vdesk.core.exceptions import (
    CyclicMoveError,
    InvalidTargetError,
    NotFoundError,
    TransientError,
    ValidationError,
)
from vdesk.crud.base import DocumentStore, StoreError, StoreErrorReason
from vdesk.schemas.item import (
    ItemCreate,
    ItemPatch,
    ItemRecord,
    MovePatch,
    PathPatch,
    PositionPatch,
    RenamePatch,
)
from vdesk.utils import generate_item_id, get_logger
from vdesk.utils.path_util import join_path, sanitize_name

logger = get_logger(__name__)


class ItemRepository:
    """Folder/file tree kept in a flat, kind-partitioned document store.

    ``parent_id`` is the source of truth for structure; ``path`` is a
    materialized copy this class recomputes on every create, rename and move.
    Multi-document operations (path cascades, recursive delete) are plain
    sequences of single-document writes: a concurrent reader can see a
    partially migrated subtree until the sequence completes.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    @staticmethod
    def _translate(error: StoreError, id: Optional[str] = None) -> Exception:
        if error.reason == StoreErrorReason.NOT_FOUND:
            return NotFoundError(f"No item found with ID {id}" if id else "No item found with that ID")
        if error.reason == StoreErrorReason.CONFLICT:
            return TransientError(f"Concurrent write conflict on item {id}")
        return TransientError(error.message)

    async def _load(self, id: str, partition_hint: Optional[ItemKind] = None) -> ItemRecord:
        try:
            doc = await self.store.get_by_id(id, partition_hint)
        except StoreError as e:
            raise self._translate(e, id) from e
        return ItemRecord.model_validate(doc)

    async def _patch(self, item: ItemRecord, patch: ItemPatch) -> ItemRecord:
        try:
            doc = await self.store.update(item.id, patch, partition_hint=item.kind)
        except StoreError as e:
            raise self._translate(e, item.id) from e
        return ItemRecord.model_validate(doc)

    async def _query(self, predicate: dict) -> List[ItemRecord]:
        try:
            docs = await self.store.query_all(predicate)
        except StoreError as e:
            raise self._translate(e) from e
        return [ItemRecord.model_validate(doc) for doc in docs]

    async def _children(self, parent_id: Optional[str]) -> List[ItemRecord]:
        if not parent_id:
            # Root items may carry null, an empty string, or no parent field at all
            return await self._query({"parent_id": {"$in": [None, ""]}})
        return await self._query({"parent_id": parent_id})

    async def _parent_path(self, parent_id: Optional[str]) -> str:
        """Path a child of ``parent_id`` hangs under; '' at root."""
        if not parent_id:
            return ""
        parent = await self._load(parent_id)
        if not parent.is_folder:
            raise InvalidTargetError(f"Parent {parent_id} is not a folder")
        return parent.path

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, id: str) -> ItemRecord:
        return await self._load(id)

    async def list_all(self) -> List[ItemRecord]:
        items = await self._query({"kind": {"$in": [ItemKind.FOLDER.value, ItemKind.FILE.value]}})
        return sorted(items, key=lambda item: (item.path, item.id))

    async def list_children(self, parent_id: Optional[str] = None) -> List[ItemRecord]:
        """Direct children of ``parent_id``: folders first, then by name."""
        children = await self._children(parent_id)
        return sorted(children, key=lambda item: (not item.is_folder, item.name.casefold(), item.name, item.id))

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def _create(self, obj_in: ItemCreate) -> ItemRecord:
        try:
            doc = await self.store.create(obj_in.model_dump())
        except StoreError as e:
            raise self._translate(e, obj_in.id) from e
        item = ItemRecord.model_validate(doc)
        logger.info(f"Created {item.kind.value} {item.id} at {item.path}")
        return item

    async def create_folder(
        self, name: str, parent_id: Optional[str] = None, x: float = 0, y: float = 0
    ) -> ItemRecord:
        name = sanitize_name(name)
        parent_id = parent_id or None
        parent_path = await self._parent_path(parent_id)
        return await self._create(ItemCreate(
            id=generate_item_id(ItemKind.FOLDER),
            kind=ItemKind.FOLDER,
            name=name,
            parent_id=parent_id,
            path=join_path(parent_path, name),
            x=x,
            y=y,
        ))

    async def create_file(
        self,
        name: str,
        parent_id: Optional[str] = None,
        content: Union[str, bytes, None] = b"",
        mime_type: Optional[str] = None,
        x: float = 0,
        y: float = 0,
    ) -> ItemRecord:
        name = sanitize_name(name)
        parent_id = parent_id or None
        parent_path = await self._parent_path(parent_id)

        if content is None:
            raw = b""
        elif isinstance(content, str):
            raw = content.encode("utf-8")
        else:
            raw = bytes(content)

        return await self._create(ItemCreate(
            id=generate_item_id(ItemKind.FILE),
            kind=ItemKind.FILE,
            name=name,
            parent_id=parent_id,
            path=join_path(parent_path, name),
            content=base64.b64encode(raw).decode("ascii"),
            mime_type=mime_type or "text/plain",
            size=len(raw),
            x=x,
            y=y,
        ))

    # ------------------------------------------------------------------
    # Structural mutations
    # ------------------------------------------------------------------

    async def _cascade_paths(self, folder: ItemRecord, seen: Optional[Set[str]] = None) -> int:
        """Rewrite the path of every descendant of ``folder``, depth-first.

        Each child's path is rebuilt from its (already rewritten) parent, so
        the old subtree prefix is replaced by the folder's new path. A node
        reached twice means the stored tree has a loop; it is not revisited.
        """
        seen = set() if seen is None else seen
        seen.add(folder.id)
        updated = 0
        for child in await self._children(folder.id):
            if child.id in seen:
                logger.error(f"Cycle detected at {child.id} during path cascade")
                continue
            new_path = join_path(folder.path, child.name)
            if new_path != child.path:
                try:
                    child = await self._patch(child, PathPatch(path=new_path))
                except NotFoundError:
                    # Deleted concurrently; nothing left to rewrite below it
                    logger.warning(f"Item {child.id} vanished during path cascade")
                    continue
                updated += 1
            if child.is_folder:
                updated += await self._cascade_paths(child, seen)
        return updated

    async def rename(self, id: str, new_name: str) -> ItemRecord:
        new_name = sanitize_name(new_name, field="newName")
        item = await self._load(id)
        old_path = item.path
        parent_path = await self._parent_path(item.parent_id)

        item = await self._patch(item, RenamePatch(name=new_name, path=join_path(parent_path, new_name)))
        logger.info(f"Renamed {item.id}: {old_path} -> {item.path}")

        if item.is_folder and item.path != old_path:
            count = await self._cascade_paths(item)
            logger.info(f"Updated {count} descendant paths under {item.path}")
        return item

    async def _assert_not_ancestor(self, item: ItemRecord, target: ItemRecord) -> None:
        """Walk the target's current ancestor chain looking for ``item``."""
        seen = set()
        current: Optional[ItemRecord] = target
        while current is not None:
            if current.id == item.id:
                raise CyclicMoveError()
            if current.id in seen:
                logger.error(f"Cycle detected in stored ancestry of {target.id}")
                raise CyclicMoveError(f"Ancestry of {target.id} is cyclic")
            seen.add(current.id)
            if not current.parent_id:
                return
            try:
                current = await self._load(current.parent_id)
            except NotFoundError:
                # Orphaned chain: the item cannot be above a missing link
                return

    async def move(self, id: str, new_parent_id: Optional[str] = None) -> ItemRecord:
        new_parent_id = new_parent_id or None
        item = await self._load(id)

        if item.parent_id == new_parent_id:
            return item

        parent_path = ""
        if new_parent_id is not None:
            target = await self._load(new_parent_id)
            if not target.is_folder:
                raise InvalidTargetError("Move target must be a folder")
            if item.is_folder:
                await self._assert_not_ancestor(item, target)
            parent_path = target.path

        old_path = item.path
        item = await self._patch(item, MovePatch(parent_id=new_parent_id, path=join_path(parent_path, item.name)))
        logger.info(f"Moved {item.id}: {old_path} -> {item.path}")

        if item.is_folder and item.path != old_path:
            count = await self._cascade_paths(item)
            logger.info(f"Updated {count} descendant paths under {item.path}")
        return item

    async def update_position(self, id: str, x: float, y: float) -> ItemRecord:
        if x is None or y is None:
            raise ValidationError("x and y coordinates are required", field="x" if x is None else "y")
        item = await self._load(id)
        return await self._patch(item, PositionPatch(x=x, y=y))

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    async def _delete_one(self, id: str) -> bool:
        try:
            await self.store.delete(id)
        except StoreError as e:
            if e.not_found:
                logger.debug(f"Item {id} already deleted")
                return False
            raise self._translate(e, id) from e
        return True

    async def delete_recursive(self, id: str, seen: Optional[Set[str]] = None) -> int:
        """Delete ``id`` and its whole subtree, children before parents.

        Items already gone count as deleted. Returns how many documents this
        call actually removed.
        """
        seen = set() if seen is None else seen
        seen.add(id)
        removed = 0
        for child in await self._children(id):
            if child.id in seen:
                logger.error(f"Cycle detected at {child.id} during recursive delete")
                continue
            removed += await self.delete_recursive(child.id, seen)
        if await self._delete_one(id):
            removed += 1
        return removed
