import threading
import time

from vdesk.consts.item_kind import ItemKind

_id_lock = threading.Lock()
_last_timestamp = 0


def unique_timestamp() -> int:
    """Millisecond timestamp, strictly increasing within this process."""
    global _last_timestamp
    with _id_lock:
        now = int(time.time() * 1000)
        _last_timestamp = now if now > _last_timestamp else _last_timestamp + 1
        return _last_timestamp


def generate_item_id(kind: ItemKind) -> str:
    return f"{kind.id_prefix}{unique_timestamp()}"
