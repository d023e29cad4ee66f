from vdesk.models.item import Item

__all__ = ["Item"]

# List of all document models for Beanie initialization
DOCUMENT_MODELS = [
    Item,
]
