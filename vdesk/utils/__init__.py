from vdesk.utils.logging import get_logger, setup_logging
from vdesk.utils.api_response import ok, created
from vdesk.utils.base import generate_item_id, unique_timestamp


__all__= [
    "get_logger",
    "setup_logging",
    "ok",
    "created",
    "generate_item_id",
    "unique_timestamp",
]
