from .item_repository import ItemRepository
from .item_service import ItemService

__all__ = ["ItemRepository", "ItemService"]
