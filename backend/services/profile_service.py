from typing import Any, Mapping

from authentication.repository import utc_timestamp
from db.errors import TableNotFound
from db.tabular_store import Row, TabularStore
from models.profiles import PROFILE_HEADER, PROFILES_TABLE, ProfileColumns

EDITABLE_FIELDS = (
    ProfileColumns.TERRITORY,
    ProfileColumns.COMPANY_DESCRIPTION,
    ProfileColumns.COMPANY_SIZE,
    ProfileColumns.WEBSITE_URL,
    ProfileColumns.COMPANY_NAME,
)


def get_profile(store: TabularStore, email: str) -> Row | None:
    try:
        return store.find_by_column(PROFILES_TABLE, ProfileColumns.EMAIL, email)
    except TableNotFound:
        return None


def upsert_profile(store: TabularStore, email: str, updates: Mapping[str, Any]) -> tuple[Row, bool]:
    """Update the caller's UserProfiles row, creating it if needed.

    Returns ``(row, created)``. Only editable fields are written; ``None``
    values leave the stored value alone.
    """
    changes = {
        name: value
        for name, value in updates.items()
        if name in EDITABLE_FIELDS and value is not None
    }
    now = utc_timestamp()
    store.ensure_header(PROFILES_TABLE, PROFILE_HEADER)

    updated = store.update_where(
        PROFILES_TABLE,
        ProfileColumns.EMAIL,
        email,
        {**changes, ProfileColumns.UPDATED_AT: now},
    )
    if updated is not None:
        return updated, False

    row = {name: "" for name in PROFILE_HEADER}
    row.update(changes)
    row[ProfileColumns.EMAIL] = email
    row[ProfileColumns.CREATED_AT] = now
    row[ProfileColumns.UPDATED_AT] = now
    store.append_mapping(PROFILES_TABLE, row)
    return {k: str(v) for k, v in row.items()}, True
