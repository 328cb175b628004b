import threading

from fastapi import Request

from db.session import open_store
from db.tabular_store import TabularStore

_open_lock = threading.Lock()


def get_store(request: Request) -> TabularStore:
    """The store opened at startup; retried here if startup could not reach it."""
    store = getattr(request.app.state, "store", None)
    if store is not None:
        return store

    with _open_lock:
        store = getattr(request.app.state, "store", None)
        if store is None:
            store = open_store()
            request.app.state.store = store
    return store
