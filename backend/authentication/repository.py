from datetime import datetime, timezone

from db.tabular_store import TabularStore
from models.credentials import CREDENTIAL_HEADER, CREDENTIALS_TABLE, CredentialColumns
from models.users import USER_HEADER, USERS_TABLE, User, UserColumns


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_user_by_id(store: TabularStore, user_id: str) -> User | None:
    row = store.find_by_column(USERS_TABLE, UserColumns.ID, user_id)
    return User.from_row(row) if row else None


def get_user_by_email(store: TabularStore, email: str) -> User | None:
    row = store.find_by_column(USERS_TABLE, UserColumns.EMAIL, email)
    return User.from_row(row) if row else None


def append_user(store: TabularStore, user: User) -> User | None:
    """Write a new Users row and return it as read back from the sheet."""
    store.ensure_header(USERS_TABLE, USER_HEADER)
    store.append_mapping(USERS_TABLE, user.to_row())
    return get_user_by_email(store, user.email)


def list_users(store: TabularStore, search: str | None = None, limit: int = 100) -> list[User]:
    users = [User.from_row(row) for row in store.get_all(USERS_TABLE)]
    if search:
        needle = search.strip().lower()
        users = [u for u in users if needle in u.email.lower()]
    return users[: max(1, min(limit, 500))]


def update_user_status(store: TabularStore, user_id: str, status: str) -> bool:
    updated = store.update_where(USERS_TABLE, UserColumns.ID, user_id, {UserColumns.STATUS: status})
    return updated is not None


def get_password_hash(store: TabularStore, email: str) -> str | None:
    if not store.table_exists(CREDENTIALS_TABLE):
        return None
    row = store.find_by_column(CREDENTIALS_TABLE, CredentialColumns.EMAIL, email)
    if not row:
        return None
    return row[CredentialColumns.PASSWORD_HASH] or None


def set_password_hash(store: TabularStore, email: str, password_hash: str) -> None:
    store.ensure_header(CREDENTIALS_TABLE, CREDENTIAL_HEADER)
    updated = store.update_where(
        CREDENTIALS_TABLE,
        CredentialColumns.EMAIL,
        email,
        {CredentialColumns.PASSWORD_HASH: password_hash},
    )
    if updated is None:
        store.append_mapping(
            CREDENTIALS_TABLE,
            {
                CredentialColumns.EMAIL: email,
                CredentialColumns.PASSWORD_HASH: password_hash,
                CredentialColumns.CREATED_AT: utc_timestamp(),
            },
        )
