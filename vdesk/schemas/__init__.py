from vdesk.schemas.response import ApiResponse, ApiError, ErrorDetail, HealthCheck
from vdesk.schemas.item import (
    ItemCreate, ItemRecord, ItemPatch, RenamePatch, MovePatch, PathPatch, PositionPatch,
    FolderCreateRequest, FileCreateRequest, PositionUpdateRequest, RenameRequest, MoveRequest
)

__all__ = [
    "ApiResponse",
    "ApiError",
    "ErrorDetail",
    "HealthCheck",
    "ItemCreate",
    "ItemRecord",
    "ItemPatch",
    "RenamePatch",
    "MovePatch",
    "PathPatch",
    "PositionPatch",
    "FolderCreateRequest",
    "FileCreateRequest",
    "PositionUpdateRequest",
    "RenameRequest",
    "MoveRequest",
]
