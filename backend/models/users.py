# models/users.py

from dataclasses import dataclass

from db.tabular_store import Row

USERS_TABLE = "Users"

ROLE_USER = "user"
ROLE_ADMIN = "admin"
STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"


class UserColumns:
    ID = "id"
    EMAIL = "email"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    PARTNER_COMPANY = "partner_company"  # organizational affiliation
    ROLE = "role"                        # advisory only, see authorization.py
    STATUS = "status"
    CREATED_AT = "created_at"


USER_HEADER = [
    UserColumns.ID,
    UserColumns.EMAIL,
    UserColumns.FIRST_NAME,
    UserColumns.LAST_NAME,
    UserColumns.PARTNER_COMPANY,
    UserColumns.ROLE,
    UserColumns.STATUS,
    UserColumns.CREATED_AT,
]


@dataclass(frozen=True)
class User:
    id: str
    email: str
    first_name: str
    last_name: str
    affiliation: str
    role: str
    status: str
    created_at: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    @classmethod
    def from_row(cls, row: Row) -> "User":
        return cls(
            id=row.get(UserColumns.ID, ""),
            email=row.get(UserColumns.EMAIL, ""),
            first_name=row.get(UserColumns.FIRST_NAME, ""),
            last_name=row.get(UserColumns.LAST_NAME, ""),
            affiliation=row.get(UserColumns.PARTNER_COMPANY, ""),
            role=row.get(UserColumns.ROLE, ""),
            status=row.get(UserColumns.STATUS, ""),
            created_at=row.get(UserColumns.CREATED_AT, ""),
        )

    def to_row(self) -> Row:
        return {
            UserColumns.ID: self.id,
            UserColumns.EMAIL: self.email,
            UserColumns.FIRST_NAME: self.first_name,
            UserColumns.LAST_NAME: self.last_name,
            UserColumns.PARTNER_COMPANY: self.affiliation,
            UserColumns.ROLE: self.role,
            UserColumns.STATUS: self.status,
            UserColumns.CREATED_AT: self.created_at,
        }
