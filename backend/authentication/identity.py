import logging
import threading
import uuid
from dataclasses import dataclass

from authentication.errors import MissingEmail, UserAlreadyExists, UserNotFound
from authentication.repository import (
    append_user,
    get_user_by_email,
    set_password_hash,
    utc_timestamp,
)
from db.tabular_store import TabularStore
from models.users import ROLE_USER, STATUS_ACTIVE, User

logger = logging.getLogger(__name__)

DEFAULT_AFFILIATION = "External Partner"

# email domain -> partner company assigned on first login
DOMAIN_AFFILIATIONS = {
    "techflow.com": "TechFlow Solutions",
    "digitalinnovations.com": "Digital Innovations Inc.",
    "cloudware.com": "CloudWare Partners",
    "databridge.com": "DataBridge Consulting",
    "daxa.ai": "Daxa Internal",
}

_email_locks_guard = threading.Lock()
_email_locks: dict[str, threading.Lock] = {}


@dataclass(frozen=True)
class ExternalIdentity:
    """What an identity provider (or the register form) asserts about a login."""

    email: str | None
    given_name: str | None = None
    family_name: str | None = None
    external_id: str | None = None


def affiliation_from_email_domain(email: str) -> str:
    _, _, domain = (email or "").rpartition("@")
    return DOMAIN_AFFILIATIONS.get(domain.strip().lower(), DEFAULT_AFFILIATION)


def _lock_for(email: str) -> threading.Lock:
    key = email.strip().lower()
    with _email_locks_guard:
        lock = _email_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _email_locks[key] = lock
        return lock


def _require_email(identity: ExternalIdentity) -> str:
    email = (identity.email or "").strip()
    if not email:
        raise MissingEmail("No email in identity assertion")
    return email


def _append_new_user(
    store: TabularStore,
    identity: ExternalIdentity,
    email: str,
    affiliation: str | None,
    role: str,
) -> User:
    new_user = User(
        id=identity.external_id or uuid.uuid4().hex,
        email=email,
        first_name=identity.given_name or "Unknown",
        last_name=identity.family_name or "User",
        affiliation=affiliation or affiliation_from_email_domain(email),
        role=role,
        status=STATUS_ACTIVE,
        created_at=utc_timestamp(),
    )
    created = append_user(store, new_user)
    if created is None:
        raise UserNotFound(f"User row for {email} missing after append")
    logger.info("New user created: %s", email)
    return created


def resolve_or_create(
    store: TabularStore,
    identity: ExternalIdentity,
    *,
    affiliation: str | None = None,
    role: str = ROLE_USER,
) -> User:
    """Return the Users row for ``identity.email``, creating it on first login.

    Find-or-create is serialized per email inside this process only; two
    processes racing on the same new email can still both append a row.
    """
    email = _require_email(identity)

    with _lock_for(email):
        user = get_user_by_email(store, email)
        if user is not None:
            logger.info("Existing user found: %s", email)
            return user
        return _append_new_user(store, identity, email, affiliation, role)


def register_user(
    store: TabularStore,
    identity: ExternalIdentity,
    password_hash: str,
    *,
    affiliation: str | None = None,
    role: str = ROLE_USER,
) -> User:
    """Create a user with a password; UserAlreadyExists if the email is taken.

    The existence check, the Users append and the credential write share the
    per-email lock, so a concurrent registration cannot replace the password.
    """
    email = _require_email(identity)

    with _lock_for(email):
        if get_user_by_email(store, email) is not None:
            raise UserAlreadyExists(email)
        user = _append_new_user(store, identity, email, affiliation, role)
        set_password_hash(store, user.email, password_hash)
    return user
