"""Request-time authorization.

A token only identifies a user. The effective role is recomputed on every
check: admin if the email is on the active Admins allowlist, otherwise the
role stored on the Users row.
"""

import logging
import os
from dataclasses import dataclass

from authentication.errors import TokenInvalid, UserInactive, UserNotFound
from authentication.repository import get_user_by_id
from authentication.security import decode_token
from db.errors import StoreError
from db.tabular_store import TabularStore
from models.admins import ADMINS_TABLE, AdminEntry
from models.users import ROLE_ADMIN, ROLE_USER

logger = logging.getLogger(__name__)

# With the allowlist unreadable: "0" keeps the stored role, "1" drops to "user".
ALLOWLIST_FAIL_CLOSED = os.getenv("ADMIN_ALLOWLIST_FAIL_CLOSED", "0") == "1"


@dataclass(frozen=True)
class EffectiveIdentity:
    id: str
    email: str
    first_name: str
    last_name: str
    affiliation: str
    claimed_role: str    # stored role, informational
    effective_role: str  # authoritative

    @property
    def is_admin(self) -> bool:
        return self.effective_role == ROLE_ADMIN


def _allowlist_contains(store: TabularStore, email: str) -> bool:
    for row in store.get_all(ADMINS_TABLE):
        entry = AdminEntry.from_row(row)
        if entry.is_active and entry.matches(email):
            return True
    return False


def is_admin(store: TabularStore, email: str) -> bool:
    """Case-insensitive active-allowlist check; False when the sheet can't be read."""
    if not email:
        return False
    try:
        return _allowlist_contains(store, email)
    except StoreError as exc:
        logger.warning("Admins allowlist unavailable (%s); treating %s as non-admin", exc, email)
        return False


def _effective_role(store: TabularStore, email: str, stored_role: str, fail_closed: bool) -> str:
    try:
        if _allowlist_contains(store, email):
            return ROLE_ADMIN
    except StoreError as exc:
        fallback = ROLE_USER if fail_closed else stored_role
        logger.warning("Admins allowlist unavailable (%s); using role '%s'", exc, fallback)
        return fallback
    return stored_role


def verify_and_resolve(
    store: TabularStore,
    token: str,
    *,
    secret: str | None = None,
    fail_closed: bool | None = None,
) -> EffectiveIdentity:
    payload = decode_token(token, secret=secret)
    user_id = payload.get("sub")
    if not user_id:
        raise TokenInvalid("Token carries no subject")

    user = get_user_by_id(store, user_id)
    if user is None:
        raise UserNotFound(user_id)
    if not user.is_active:
        raise UserInactive(user_id)

    role = _effective_role(
        store,
        user.email,
        user.role,
        ALLOWLIST_FAIL_CLOSED if fail_closed is None else fail_closed,
    )
    return EffectiveIdentity(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        affiliation=user.affiliation,
        claimed_role=str(payload.get("role") or user.role),
        effective_role=role,
    )


def optional_verify(
    store: TabularStore,
    token: str | None,
    *,
    secret: str | None = None,
) -> EffectiveIdentity | None:
    if not token:
        return None
    try:
        return verify_and_resolve(store, token, secret=secret)
    except Exception as exc:
        logger.info("Optional auth failed: %s", exc)
        return None
