"""Pytest configuration.

Puts ``backend/`` on sys.path so application modules import the same way
they do under uvicorn (``from db.tabular_store import ...``).
"""

import os
import sys
from pathlib import Path

import pytest


def _prepend_sys_path(path: Path) -> None:
    resolved = str(path.resolve())
    if resolved not in sys.path:
        sys.path.insert(0, resolved)


REPO_ROOT = Path(__file__).resolve().parent.parent
_prepend_sys_path(REPO_ROOT / "backend")

# must be set before the application modules read them
os.environ.setdefault("SHEETS_BACKEND", "memory")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")
os.environ.setdefault("ADMIN_ALLOWLIST_FAIL_CLOSED", "0")

from authentication.identity import ExternalIdentity, resolve_or_create  # noqa: E402
from authentication.security import issue_token  # noqa: E402
from db.memory_backend import InMemoryGridBackend  # noqa: E402
from db.tabular_store import TabularStore, ensure_tables  # noqa: E402
from models.registry import SHEET_SCHEMAS  # noqa: E402
from services.admin_service import add_admin  # noqa: E402


@pytest.fixture
def backend():
    return InMemoryGridBackend()


@pytest.fixture
def store(backend):
    """Store with every application sheet provisioned and empty."""
    s = TabularStore(backend)
    ensure_tables(s, SHEET_SCHEMAS)
    return s


@pytest.fixture
def make_user(store):
    """Create (or fetch) a user and return ``(user, bearer_headers)``."""

    def _make(email, first_name="Pat", last_name="Partner", admin=False):
        user = resolve_or_create(
            store,
            ExternalIdentity(email=email, given_name=first_name, family_name=last_name),
        )
        if admin:
            add_admin(store, email, "tests")
        headers = {"Authorization": f"Bearer {issue_token(user)}"}
        return user, headers

    return _make


@pytest.fixture
def client(store):
    from fastapi.testclient import TestClient

    from main import app

    app.state.store = store
    try:
        yield TestClient(app)
    finally:
        app.state.store = None
