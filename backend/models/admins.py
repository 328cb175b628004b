# models/admins.py

from dataclasses import dataclass

from db.tabular_store import Row
from models.users import STATUS_ACTIVE

ADMINS_TABLE = "Admins"


class AdminColumns:
    EMAIL = "email"
    ADDED_BY = "added_by"
    ADDED_AT = "added_at"
    STATUS = "status"


ADMIN_HEADER = [
    AdminColumns.EMAIL,
    AdminColumns.ADDED_BY,
    AdminColumns.ADDED_AT,
    AdminColumns.STATUS,
]


@dataclass(frozen=True)
class AdminEntry:
    email: str
    added_by: str
    added_at: str
    status: str

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def matches(self, email: str) -> bool:
        return bool(self.email) and self.email.lower() == (email or "").lower()

    @classmethod
    def from_row(cls, row: Row) -> "AdminEntry":
        return cls(
            email=row.get(AdminColumns.EMAIL, ""),
            added_by=row.get(AdminColumns.ADDED_BY, ""),
            added_at=row.get(AdminColumns.ADDED_AT, ""),
            status=row.get(AdminColumns.STATUS, ""),
        )

    def to_row(self) -> Row:
        return {
            AdminColumns.EMAIL: self.email,
            AdminColumns.ADDED_BY: self.added_by,
            AdminColumns.ADDED_AT: self.added_at,
            AdminColumns.STATUS: self.status,
        }
