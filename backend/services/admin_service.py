import logging

from authentication.repository import utc_timestamp
from db.errors import TableNotFound
from db.tabular_store import TabularStore
from models.admins import ADMIN_HEADER, ADMINS_TABLE, AdminColumns, AdminEntry
from models.users import STATUS_ACTIVE, STATUS_INACTIVE

logger = logging.getLogger(__name__)


class AdminAlreadyExists(Exception):
    pass


def list_admins(store: TabularStore, include_inactive: bool = False) -> list[AdminEntry]:
    try:
        rows = store.get_all(ADMINS_TABLE)
    except TableNotFound:
        return []
    entries = [AdminEntry.from_row(row) for row in rows]
    return [e for e in entries if include_inactive or e.is_active]


def add_admin(store: TabularStore, email: str, added_by: str) -> AdminEntry:
    """Allowlist ``email`` (stored lower-cased).

    An inactive entry for the same email is reactivated; an active one raises
    AdminAlreadyExists.
    """
    admin_email = email.strip().lower()
    store.ensure_header(ADMINS_TABLE, ADMIN_HEADER)

    matching = [e for e in list_admins(store, include_inactive=True) if e.matches(admin_email)]
    if any(e.is_active for e in matching):
        raise AdminAlreadyExists(admin_email)

    now = utc_timestamp()
    if matching:
        updated = store.update_first(
            ADMINS_TABLE,
            lambda row: AdminEntry.from_row(row).matches(admin_email),
            {
                AdminColumns.STATUS: STATUS_ACTIVE,
                AdminColumns.ADDED_BY: added_by,
                AdminColumns.ADDED_AT: now,
            },
        )
        if updated is not None:
            logger.info("Admin %s reactivated by %s", admin_email, added_by)
            return AdminEntry.from_row(updated)

    entry = AdminEntry(email=admin_email, added_by=added_by, added_at=now, status=STATUS_ACTIVE)
    store.append_mapping(ADMINS_TABLE, entry.to_row())
    logger.info("Admin %s added by %s", admin_email, added_by)
    return entry


def remove_admin(store: TabularStore, email: str) -> bool:
    """Mark every active allowlist row for ``email`` inactive.

    Returns False if there was nothing to deactivate.
    """
    if not store.table_exists(ADMINS_TABLE):
        return False

    def _active_match(row) -> bool:
        entry = AdminEntry.from_row(row)
        return entry.is_active and entry.matches(email)

    removed = 0
    # one row per pass; each pass re-reads the sheet before writing
    while store.update_first(ADMINS_TABLE, _active_match, {AdminColumns.STATUS: STATUS_INACTIVE}):
        removed += 1

    if removed:
        logger.info("Admin %s deactivated (%d rows)", email, removed)
    return removed > 0
