from datetime import datetime
from typing import Optional, Annotated
from beanie import Document, Indexed
from pydantic import Field
from vdesk.consts.item_kind import ItemKind
from vdesk.configs.settings import settings


class Item(Document):
    """Folder or file node of the desktop tree, one document per item"""

    id: str = Field(..., description="Kind-prefixed identifier, e.g. folder-1718000000000")
    kind: Annotated[ItemKind, Indexed()] = Field(..., description="Partition value: folder or file")
    name: str = Field(..., description="Leaf display name")
    parent_id: Annotated[Optional[str], Indexed()] = Field(None, description="Parent folder id, None at root")
    path: Annotated[str, Indexed()] = Field(..., description="Materialized absolute path")
    x: float = Field(0, description="Desktop x coordinate")
    y: float = Field(0, description="Desktop y coordinate")

    # File only
    content: Optional[str] = Field(None, description="Base64 encoded file content")
    mime_type: Optional[str] = Field(None, description="File MIME type")
    size: Optional[int] = Field(None, description="Raw content size (bytes)")

    created_at: datetime = Field(default_factory=datetime.utcnow, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    class Settings:
        name = settings.MONGO_COLLECTION
