import asyncio
import base64
import math
from typing import Any, Awaitable, Dict, List, Optional, Tuple, TypeVar

from vdesk.configs.settings import settings
from vdesk.core.exceptions import NotFoundError, TransientError, ValidationError
from vdesk.crud.base import DocumentStore
from vdesk.schemas.item import (
    FileCreateRequest,
    FolderCreateRequest,
    ItemRecord,
    MoveRequest,
    PositionUpdateRequest,
    RenameRequest,
)
from vdesk.services.item_repository import ItemRepository
from vdesk.utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _serialize(item: ItemRecord) -> Dict[str, Any]:
    return item.model_dump(mode="json", by_alias=True)


def _coordinate(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite number", field=field)
    return float(value)


def _optional_coordinates(x: Optional[float], y: Optional[float]) -> Tuple[float, float]:
    return (
        0 if x is None else _coordinate(x, "x"),
        0 if y is None else _coordinate(y, "y"),
    )


def _log_background_result(task: "asyncio.Future") -> None:
    if task.cancelled():
        logger.warning("Timed out store operation was cancelled")
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Timed out store operation failed: {error}")
    else:
        logger.info("Timed out store operation completed")


class ItemService:
    """Validates requests, runs repository operations and shapes payloads"""

    def __init__(self, store: DocumentStore, timeout: Optional[float] = None):
        self.repository = ItemRepository(store)
        self.timeout = settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout

    async def _run(self, operation: Awaitable[T]) -> T:
        """Await ``operation`` for at most ``self.timeout`` seconds.

        On expiry the caller gets a TransientError but the operation itself
        keeps running: a rename or move cascade is never cut off halfway.
        """
        task = asyncio.ensure_future(operation)
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Store operation timed out after {self.timeout}s, finishing in background")
            task.add_done_callback(_log_background_result)
            raise TransientError("Storage operation timed out") from e

    async def list_items(self) -> Dict[str, List[Dict[str, Any]]]:
        items = await self._run(self.repository.list_all())
        return {"items": [_serialize(item) for item in items]}

    async def list_directory(self, parent_id: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        contents = await self._run(self.repository.list_children(parent_id or None))
        return {"contents": [_serialize(item) for item in contents]}

    async def get_item(self, id: str) -> Dict[str, Any]:
        item = await self._run(self.repository.get(id))
        return {"item": _serialize(item)}

    async def create_folder(self, request: FolderCreateRequest) -> Dict[str, Any]:
        x, y = _optional_coordinates(request.x, request.y)
        folder = await self._run(self.repository.create_folder(request.name, request.parent_id, x=x, y=y))
        return {"folder": _serialize(folder)}

    async def create_file(self, request: FileCreateRequest) -> Dict[str, Any]:
        x, y = _optional_coordinates(request.x, request.y)
        file = await self._run(self.repository.create_file(
            request.name,
            request.parent_id,
            content=request.content,
            mime_type=request.mime_type,
            x=x,
            y=y,
        ))
        return {"file": _serialize(file)}

    async def upload_file(
        self,
        filename: Optional[str],
        data: bytes,
        content_type: Optional[str],
        parent_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        if len(data) > settings.UPLOAD_MAX_BYTES:
            limit_mb = settings.UPLOAD_MAX_BYTES / (1024 * 1024)
            raise ValidationError(f"File exceeds the {limit_mb:g} MB upload limit", field="file")
        file = await self._run(self.repository.create_file(
            filename,
            parent_id,
            content=data,
            mime_type=content_type or "application/octet-stream",
        ))
        return {"file": _serialize(file)}

    async def download_file(self, id: str) -> Tuple[ItemRecord, bytes]:
        item = await self._run(self.repository.get(id))
        if item.is_folder:
            raise NotFoundError("File not found")
        return item, base64.b64decode(item.content or "")

    async def update_position(self, id: str, request: PositionUpdateRequest) -> Dict[str, Any]:
        if request.x is None or request.y is None:
            raise ValidationError("x and y coordinates are required", field="x" if request.x is None else "y")
        x, y = _coordinate(request.x, "x"), _coordinate(request.y, "y")
        item = await self._run(self.repository.update_position(id, x, y))
        return {"item": _serialize(item)}

    async def rename_item(self, id: str, request: RenameRequest) -> Dict[str, Any]:
        if not request.new_name or not request.new_name.strip():
            raise ValidationError("A new name is required", field="newName")
        item = await self._run(self.repository.rename(id, request.new_name))
        return {"item": _serialize(item)}

    async def move_item(self, id: str, request: MoveRequest) -> Dict[str, Any]:
        item = await self._run(self.repository.move(id, request.target_parent_id or None))
        return {"item": _serialize(item)}

    async def delete_item(self, id: str) -> int:
        removed = await self._run(self.repository.delete_recursive(id))
        logger.info(f"Deleted {removed} item(s) for {id}")
        return removed
