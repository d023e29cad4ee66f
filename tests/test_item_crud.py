"""ItemCRUD query shaping and error mapping, with the Beanie document faked out."""

import pytest
from pymongo.errors import AutoReconnect, DuplicateKeyError

from vdesk.consts.item_kind import ItemKind
from vdesk.crud.base import StoreError, StoreErrorReason, matches
from vdesk.crud.item import ItemCRUD, _to_mongo
from vdesk.schemas.item import PositionPatch


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    async def to_list(self):
        return self.docs


class FakeItem:
    """Stands in for the Beanie ``Item`` document: same call surface, dict storage."""

    collection = {}
    queries = []
    fail_with = None

    def __init__(self, **data):
        self.data = data

    @property
    def id(self):
        return self.data["id"]

    def model_dump(self, exclude=None):
        return {k: v for k, v in self.data.items() if k not in (exclude or set())}

    async def insert(self):
        if self.id in self.collection:
            raise DuplicateKeyError("E11000 duplicate key")
        self.collection[self.id] = self

    async def set(self, update):
        self.data.update(update)

    async def delete(self):
        del self.collection[self.id]

    @classmethod
    async def find_one(cls, query):
        cls.queries.append(query)
        if cls.fail_with is not None:
            raise cls.fail_with
        doc = cls.collection.get(query["_id"])
        if doc is not None and doc.data["kind"] == query["kind"]:
            return doc
        return None

    @classmethod
    def find(cls, query):
        cls.queries.append(query)
        plain = {("id" if k == "_id" else k): v for k, v in query.items()}
        return FakeCursor([doc for doc in cls.collection.values() if matches(doc.data, plain)])


@pytest.fixture
def crud():
    FakeItem.collection = {}
    FakeItem.queries = []
    FakeItem.fail_with = None
    item_crud = ItemCRUD()
    item_crud.model = FakeItem
    return item_crud


def _folder(id="folder-1", **extra):
    doc = {"id": id, "kind": ItemKind.FOLDER, "name": "Docs", "parent_id": None, "path": "/Docs"}
    doc.update(extra)
    return doc


class TestToMongo:
    def test_enums_become_values(self):
        assert _to_mongo(ItemKind.FILE) == "file"
        assert _to_mongo({"$in": [ItemKind.FOLDER, ItemKind.FILE]}) == {"$in": ["folder", "file"]}

    def test_plain_values_pass_through(self):
        assert _to_mongo({"$in": [None, ""]}) == {"$in": [None, ""]}
        assert _to_mongo("folder-1") == "folder-1"


class TestItemCRUD:
    @pytest.mark.asyncio
    async def test_create_stamps_timestamps(self, crud):
        doc = await crud.create(_folder())
        assert doc["created_at"] is not None
        assert doc["updated_at"] == doc["created_at"]

    @pytest.mark.asyncio
    async def test_duplicate_key_is_conflict(self, crud):
        await crud.create(_folder())
        with pytest.raises(StoreError) as exc_info:
            await crud.create(_folder())
        assert exc_info.value.reason == StoreErrorReason.CONFLICT

    @pytest.mark.asyncio
    async def test_lookup_probes_guessed_partition_then_the_other(self, crud):
        await crud.create(_folder(id="file-looking-folder"))

        doc = await crud.get_by_id("file-looking-folder")

        assert doc["id"] == "file-looking-folder"
        assert [q["kind"] for q in FakeItem.queries] == ["file", "folder"]
        assert all(q["_id"] == "file-looking-folder" for q in FakeItem.queries)

    @pytest.mark.asyncio
    async def test_hint_searches_one_partition(self, crud):
        await crud.create(_folder())
        with pytest.raises(StoreError) as exc_info:
            await crud.get_by_id("folder-1", ItemKind.FILE)
        assert exc_info.value.not_found
        assert [q["kind"] for q in FakeItem.queries] == ["file"]

    @pytest.mark.asyncio
    async def test_update_sets_patch_fields(self, crud):
        await crud.create(_folder())
        doc = await crud.update("folder-1", PositionPatch(x=3, y=4))
        assert (doc["x"], doc["y"]) == (3, 4)
        assert doc["name"] == "Docs"

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_found(self, crud):
        with pytest.raises(StoreError) as exc_info:
            await crud.delete("folder-missing")
        assert exc_info.value.not_found

    @pytest.mark.asyncio
    async def test_root_query_is_sent_as_in_null_or_empty(self, crud):
        await crud.create(_folder())
        await crud.create(_folder(id="folder-2", name="Sub", parent_id="folder-1", path="/Docs/Sub"))

        docs = await crud.query_all({"parent_id": {"$in": [None, ""]}})

        assert FakeItem.queries[-1] == {"parent_id": {"$in": [None, ""]}}
        assert [doc["id"] for doc in docs] == ["folder-1"]

    @pytest.mark.asyncio
    async def test_query_maps_id_and_enum_values(self, crud):
        await crud.query_all({"id": "folder-1", "kind": {"$in": [ItemKind.FOLDER, ItemKind.FILE]}})
        assert FakeItem.queries[-1] == {"_id": "folder-1", "kind": {"$in": ["folder", "file"]}}

    @pytest.mark.asyncio
    async def test_driver_failure_is_transient(self, crud):
        FakeItem.fail_with = AutoReconnect("connection reset")
        with pytest.raises(StoreError) as exc_info:
            await crud.get_by_id("folder-1")
        assert exc_info.value.reason == StoreErrorReason.TRANSIENT
