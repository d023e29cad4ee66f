from vdesk.databases.store import init_store, get_store, close_store
__all__ = ["init_store", "get_store", "close_store"]
