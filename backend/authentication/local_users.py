import os
from dataclasses import dataclass

from models.users import ROLE_ADMIN


@dataclass
class LocalUser:
    email: str
    first_name: str
    last_name: str
    affiliation: str
    role: str


# Manual credential list for local/dev usage (POST /auth/email-login).
# These accounts get a Users row on first login like any other user.
USERS = [
    {
        "email": "admin@daxa.ai",
        "password": "admin123",
        "first_name": "Test",
        "last_name": "Admin",
        "affiliation": "Daxa Internal",
        "role": ROLE_ADMIN,
    },
]


def use_local_auth() -> bool:
    return os.getenv("USE_LOCAL_AUTH", "0") == "1"


def verify_local_user(email: str, password: str) -> LocalUser | None:
    for item in USERS:
        if item["email"] == email and item["password"] == password:
            return LocalUser(
                email=item["email"],
                first_name=item["first_name"],
                last_name=item["last_name"],
                affiliation=item["affiliation"],
                role=item["role"],
            )
    return None
