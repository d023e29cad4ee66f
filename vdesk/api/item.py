from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile, status
from starlette.responses import Response

from vdesk.configs.settings import settings
from vdesk.core.exceptions import ValidationError
from vdesk.databases import get_store
from vdesk.schemas.item import (
    FileCreateRequest,
    FolderCreateRequest,
    MoveRequest,
    PositionUpdateRequest,
    RenameRequest,
)
from vdesk.schemas.response import ApiError, ApiResponse
from vdesk.services.item_service import ItemService
from vdesk.utils import get_logger
from vdesk.utils.api_response import created, ok

logger = get_logger(__name__)

router = APIRouter(
    tags=["Items"],
    responses={
        400: {"model": ApiError, "description": "Bad Request"},
        404: {"model": ApiError, "description": "Not Found"},
        500: {"model": ApiError, "description": "Internal Server Error"}
    }
)


def get_item_service() -> ItemService:
    return ItemService(get_store())


def _content_disposition(filename: str) -> str:
    try:
        filename.encode("ascii")
    except UnicodeEncodeError:
        return f"attachment; filename*=utf-8''{quote(filename)}"
    return f'attachment; filename="{filename}"'


@router.get("", response_model=ApiResponse[dict], summary="List all items")
@router.get("/", response_model=ApiResponse[dict], include_in_schema=False)
async def get_all_items(service: ItemService = Depends(get_item_service)):
    data = await service.list_items()
    return ok(data=data, results=len(data["items"]))


@router.get("/directory", response_model=ApiResponse[dict], summary="List folder contents")
@router.get("/directory/{parent_id}", response_model=ApiResponse[dict], include_in_schema=False)
async def get_directory(
    parent_id: Optional[str] = None,
    parent_id_query: Optional[str] = Query(None, alias="parentId", description="Folder id, omitted for root"),
    service: ItemService = Depends(get_item_service)
):
    """Direct children of a folder (or of the root), folders first then by name"""
    data = await service.list_directory(parent_id or parent_id_query)
    return ok(data=data, results=len(data["contents"]))


@router.get("/files/{file_id}/download", summary="Download file content")
async def download_file(file_id: str, service: ItemService = Depends(get_item_service)):
    item, content = await service.download_file(file_id)
    return Response(
        content=content,
        media_type=item.mime_type or "application/octet-stream",
        headers={"Content-Disposition": _content_disposition(item.name)},
    )


@router.get("/{item_id}", response_model=ApiResponse[dict], summary="Get an item")
async def get_item(item_id: str, service: ItemService = Depends(get_item_service)):
    data = await service.get_item(item_id)
    return ok(data=data)


@router.post("/folders", response_model=ApiResponse[dict], status_code=status.HTTP_201_CREATED,
             summary="Create a folder")
async def create_folder(
    request: FolderCreateRequest = Body(...),
    service: ItemService = Depends(get_item_service)
):
    data = await service.create_folder(request)
    return created(data, message="Folder created successfully")


@router.post("/files/create", response_model=ApiResponse[dict], status_code=status.HTTP_201_CREATED,
             summary="Create a file from inline content")
async def create_file(
    request: FileCreateRequest = Body(...),
    service: ItemService = Depends(get_item_service)
):
    data = await service.create_file(request)
    return created(data, message="File created successfully")


@router.post("/files", response_model=ApiResponse[dict], status_code=status.HTTP_201_CREATED,
             summary="Upload a file")
async def upload_file(
    file: Optional[UploadFile] = File(None),
    parent_id: Optional[str] = Form(None, alias="parentId"),
    service: ItemService = Depends(get_item_service)
):
    if file is None:
        raise ValidationError("No file uploaded", field="file")

    # One byte past the limit is enough to reject oversize uploads
    data = await file.read(settings.UPLOAD_MAX_BYTES + 1)
    await file.close()

    result = await service.upload_file(file.filename, data, file.content_type, parent_id)
    return created(result, message="File uploaded successfully")


@router.patch("/{item_id}/position", response_model=ApiResponse[dict], summary="Update desktop position")
async def update_item_position(
    item_id: str,
    request: PositionUpdateRequest = Body(...),
    service: ItemService = Depends(get_item_service)
):
    data = await service.update_position(item_id, request)
    return ok(data=data)


@router.patch("/{item_id}/rename", response_model=ApiResponse[dict], summary="Rename an item")
async def rename_item(
    item_id: str,
    request: RenameRequest = Body(...),
    service: ItemService = Depends(get_item_service)
):
    data = await service.rename_item(item_id, request)
    return ok(data=data, message="Item renamed successfully")


@router.patch("/{item_id}/move", response_model=ApiResponse[dict], summary="Move an item")
async def move_item(
    item_id: str,
    request: Optional[MoveRequest] = Body(None),
    service: ItemService = Depends(get_item_service)
):
    """Omitted or null targetParentId moves the item to the root"""
    data = await service.move_item(item_id, request or MoveRequest())
    return ok(data=data, message="Item moved successfully")


@router.delete("/{item_id}", response_model=ApiResponse[None], summary="Delete an item and its subtree")
async def delete_item(item_id: str, service: ItemService = Depends(get_item_service)):
    await service.delete_item(item_id)
    return ok(data=None, message="Item deleted successfully")
