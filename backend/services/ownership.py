from typing import Iterable

from authentication.authorization import EffectiveIdentity
from db.tabular_store import Row


def owned_rows(rows: Iterable[Row], email: str, owner_column: str) -> list[Row]:
    """Rows whose owner column equals ``email`` exactly (case-sensitive)."""
    if not email:
        return []
    return [row for row in rows if row.get(owner_column) == email]


def visible_rows(
    rows: Iterable[Row],
    caller: EffectiveIdentity | None,
    owner_column: str,
) -> list[Row]:
    """Admins see everything in order; other callers only their own rows."""
    if caller is None:
        return []
    if caller.is_admin:
        return list(rows)
    return owned_rows(rows, caller.email, owner_column)


def can_view(row: Row, caller: EffectiveIdentity | None, owner_column: str) -> bool:
    return bool(visible_rows([row], caller, owner_column))
