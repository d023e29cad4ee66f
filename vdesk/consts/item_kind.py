from enum import Enum

class ItemKind(str, Enum):
    FOLDER = "folder"
    FILE = "file"

    @property
    def id_prefix(self) -> str:
        return f"{self.value}-"

    @property
    def other(self) -> "ItemKind":
        return ItemKind.FILE if self is ItemKind.FOLDER else ItemKind.FOLDER
