import math
from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from vdesk.consts.item_kind import ItemKind


# JSON numbers only: strings and booleans are rejected rather than coerced
Coordinate = Annotated[float, Field(strict=True, allow_inf_nan=False)]


def _coordinate_or_zero(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return value


class ItemCreate(BaseModel):
    """Internal schema for a new item document with all required fields"""
    id: str
    kind: ItemKind
    name: str
    parent_id: Optional[str] = None
    path: str
    x: float = 0
    y: float = 0
    content: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None


class ItemRecord(BaseModel):
    """Item as read back from the store; serialized in camelCase over HTTP"""
    id: str
    kind: ItemKind
    name: str
    parent_id: Optional[str] = None
    path: str
    x: float = 0
    y: float = 0
    content: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "id": "file-1718000000000",
                "kind": "file",
                "name": "a.txt",
                "parentId": "folder-1717999999999",
                "path": "/Docs/a.txt",
                "x": 120,
                "y": 40,
                "content": "aGVsbG8=",
                "mimeType": "text/plain",
                "size": 5,
                "createdAt": "2024-01-15T10:30:00Z",
                "updatedAt": "2024-01-15T10:30:00Z"
            }
        }
    )

    @field_validator("x", "y", mode="before")
    @classmethod
    def default_coordinates(cls, v):
        return _coordinate_or_zero(v)

    @field_validator("parent_id", mode="before")
    @classmethod
    def normalize_root_marker(cls, v):
        return v or None

    @property
    def is_folder(self) -> bool:
        return self.kind == ItemKind.FOLDER


# Typed partial updates. Each patch names exactly the fields it may overwrite.

class ItemPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def as_update(self) -> dict:
        return self.model_dump()


class RenamePatch(ItemPatch):
    name: str
    path: str


class MovePatch(ItemPatch):
    parent_id: Optional[str]
    path: str


class PathPatch(ItemPatch):
    path: str


class PositionPatch(ItemPatch):
    x: float
    y: float


# Request bodies

class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FolderCreateRequest(_CamelRequest):
    name: Optional[str] = Field(None, description="Folder name")
    parent_id: Optional[str] = Field(None, description="Parent folder id, omitted for root")
    x: Optional[Coordinate] = Field(None, description="Desktop x coordinate")
    y: Optional[Coordinate] = Field(None, description="Desktop y coordinate")

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Docs", "parentId": None, "x": 40, "y": 40}}
    )


class FileCreateRequest(_CamelRequest):
    name: Optional[str] = Field(None, description="File name")
    parent_id: Optional[str] = Field(None, description="Parent folder id, omitted for root")
    content: str = Field("", description="Inline text content")
    mime_type: str = Field("text/plain", description="File MIME type")
    x: Optional[Coordinate] = Field(None, description="Desktop x coordinate")
    y: Optional[Coordinate] = Field(None, description="Desktop y coordinate")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "a.txt", "parentId": "folder-1717999999999",
                        "content": "hello", "mimeType": "text/plain"}
        }
    )


class PositionUpdateRequest(_CamelRequest):
    x: Optional[Coordinate] = None
    y: Optional[Coordinate] = None


class RenameRequest(_CamelRequest):
    new_name: Optional[str] = Field(None, description="New leaf name")


class MoveRequest(_CamelRequest):
    target_parent_id: Optional[str] = Field(None, description="Destination folder id, null or omitted for root")
