"""ItemService request validation, payload shapes and timeouts."""

import asyncio
import base64

import pytest

from vdesk.configs.settings import settings
from vdesk.core.exceptions import NotFoundError, TransientError, ValidationError
from vdesk.crud.memory import MemoryItemCRUD
from vdesk.schemas.item import (
    FileCreateRequest,
    FolderCreateRequest,
    MoveRequest,
    PositionUpdateRequest,
    RenameRequest,
)
from vdesk.services.item_service import ItemService


class SlowStore(MemoryItemCRUD):
    async def query_all(self, predicate=None):
        await asyncio.sleep(0.2)
        return await super().query_all(predicate)


class SlowUpdateStore(MemoryItemCRUD):
    async def update(self, id, patch, partition_hint=None):
        await asyncio.sleep(0.05)
        return await super().update(id, patch, partition_hint)


class TestPayloads:
    @pytest.mark.asyncio
    async def test_create_folder_payload_is_camel_case(self, service):
        data = await service.create_folder(FolderCreateRequest(name="Docs", x=12, y=34))
        folder = data["folder"]
        assert folder["kind"] == "folder"
        assert folder["path"] == "/Docs"
        assert folder["parentId"] is None
        assert (folder["x"], folder["y"]) == (12, 34)
        assert "parent_id" not in folder

    @pytest.mark.asyncio
    async def test_create_folder_defaults_position(self, service):
        data = await service.create_folder(FolderCreateRequest(name="Docs"))
        assert (data["folder"]["x"], data["folder"]["y"]) == (0, 0)

    @pytest.mark.asyncio
    async def test_create_file_from_request(self, service):
        folder = (await service.create_folder(FolderCreateRequest(name="Docs")))["folder"]
        data = await service.create_file(FileCreateRequest(name="a.txt", parentId=folder["id"], content="hello"))
        file = data["file"]
        assert file["path"] == "/Docs/a.txt"
        assert file["mimeType"] == "text/plain"
        assert file["size"] == 5
        assert base64.b64decode(file["content"]) == b"hello"

    @pytest.mark.asyncio
    async def test_list_items_and_directory(self, service):
        folder = (await service.create_folder(FolderCreateRequest(name="Docs")))["folder"]
        await service.create_file(FileCreateRequest(name="a.txt", parentId=folder["id"]))

        items = (await service.list_items())["items"]
        assert [item["path"] for item in items] == ["/Docs", "/Docs/a.txt"]

        root = (await service.list_directory())["contents"]
        assert [item["name"] for item in root] == ["Docs"]
        inside = (await service.list_directory(folder["id"]))["contents"]
        assert [item["name"] for item in inside] == ["a.txt"]

    @pytest.mark.asyncio
    async def test_move_with_empty_target_goes_to_root(self, service):
        folder = (await service.create_folder(FolderCreateRequest(name="Docs")))["folder"]
        file = (await service.create_file(FileCreateRequest(name="a.txt", parentId=folder["id"])))["file"]

        moved = (await service.move_item(file["id"], MoveRequest(targetParentId="")))["item"]
        assert moved["parentId"] is None
        assert moved["path"] == "/a.txt"

    @pytest.mark.asyncio
    async def test_delete_reports_removed_count(self, service):
        folder = (await service.create_folder(FolderCreateRequest(name="Docs")))["folder"]
        await service.create_file(FileCreateRequest(name="a.txt", parentId=folder["id"]))
        assert await service.delete_item(folder["id"]) == 2
        assert await service.delete_item(folder["id"]) == 0


class TestValidation:
    @pytest.mark.asyncio
    async def test_folder_name_required(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await service.create_folder(FolderCreateRequest())
        assert exc_info.value.field == "name"

    @pytest.mark.asyncio
    async def test_position_requires_both_coordinates(self, service):
        folder = (await service.create_folder(FolderCreateRequest(name="Docs")))["folder"]
        with pytest.raises(ValidationError) as exc_info:
            await service.update_position(folder["id"], PositionUpdateRequest(x=5))
        assert exc_info.value.field == "y"

    @pytest.mark.asyncio
    async def test_position_update(self, service):
        folder = (await service.create_folder(FolderCreateRequest(name="Docs")))["folder"]
        item = (await service.update_position(folder["id"], PositionUpdateRequest(x=5, y=7.5)))["item"]
        assert (item["x"], item["y"]) == (5, 7.5)

    @pytest.mark.asyncio
    async def test_rename_requires_new_name(self, service):
        folder = (await service.create_folder(FolderCreateRequest(name="Docs")))["folder"]
        for request in (RenameRequest(), RenameRequest(newName="  ")):
            with pytest.raises(ValidationError) as exc_info:
                await service.rename_item(folder["id"], request)
            assert exc_info.value.field == "newName"

    @pytest.mark.asyncio
    async def test_get_missing_item(self, service):
        with pytest.raises(NotFoundError):
            await service.get_item("folder-missing")


class TestFiles:
    @pytest.mark.asyncio
    async def test_upload_defaults_mime_type(self, service):
        file = (await service.upload_file("blob.bin", b"\x00\x01\x02", None))["file"]
        assert file["mimeType"] == "application/octet-stream"
        assert file["size"] == 3

    @pytest.mark.asyncio
    async def test_upload_size_limit(self, service, monkeypatch):
        monkeypatch.setattr(settings, "UPLOAD_MAX_BYTES", 4)
        with pytest.raises(ValidationError) as exc_info:
            await service.upload_file("big.bin", b"12345", "application/octet-stream")
        assert exc_info.value.field == "file"
        assert (await service.list_items())["items"] == []

    @pytest.mark.asyncio
    async def test_download_round_trip(self, service):
        file = (await service.upload_file("img.png", b"\x89PNG", "image/png"))["file"]
        item, content = await service.download_file(file["id"])
        assert content == b"\x89PNG"
        assert item.mime_type == "image/png"

    @pytest.mark.asyncio
    async def test_download_folder_is_not_found(self, service):
        folder = (await service.create_folder(FolderCreateRequest(name="Docs")))["folder"]
        with pytest.raises(NotFoundError):
            await service.download_file(folder["id"])


class TestTimeout:
    @pytest.mark.asyncio
    async def test_slow_store_raises_transient(self):
        service = ItemService(SlowStore(), timeout=0.05)
        with pytest.raises(TransientError) as exc_info:
            await service.list_items()
        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)
        # Let the shielded query finish before the loop closes
        await asyncio.sleep(0.3)

    @pytest.mark.asyncio
    async def test_rename_cascade_completes_after_timeout(self):
        store = SlowUpdateStore()
        service = ItemService(store, timeout=0.2)
        folder = (await service.create_folder(FolderCreateRequest(name="Docs")))["folder"]
        for i in range(10):
            await service.create_file(FileCreateRequest(name=f"{i}.txt", parentId=folder["id"]))

        with pytest.raises(TransientError):
            await service.rename_item(folder["id"], RenameRequest(newName="Documents"))

        # 11 updates at 50 ms each; the cascade keeps going after the caller gave up
        await asyncio.sleep(1)
        children = (await service.list_directory(folder["id"]))["contents"]
        assert len(children) == 10
        assert all(child["path"].startswith("/Documents/") for child in children)
