import argparse
import os

from db.session import open_store
from db.tabular_store import ensure_tables
from models.registry import SHEET_SCHEMAS
from services.admin_service import AdminAlreadyExists, add_admin


def seed(store, admin_emails: list[str], added_by: str) -> dict:
    """Create missing sheets/headers and allowlist ``admin_emails``."""
    created_tables = ensure_tables(store, SHEET_SCHEMAS)
    added, existing = [], []
    for email in admin_emails:
        if not email.strip():
            continue
        try:
            entry = add_admin(store, email, added_by)
            added.append(entry.email)
        except AdminAlreadyExists:
            existing.append(email.strip().lower())
    return {"created_tables": created_tables, "admins_added": added, "admins_existing": existing}


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Provision deal registration sheets")
    parser.add_argument(
        "--admin",
        action="append",
        default=[],
        help="email to allowlist as admin (repeatable)",
    )
    parser.add_argument("--added-by", default="seed")
    parser.add_argument("--backend", default=None, help="google or memory")
    args = parser.parse_args(argv)

    admins = args.admin or [e for e in os.getenv("ADMIN_EMAILS", "").split(",") if e.strip()]

    store = open_store(args.backend)
    result = seed(store, admins, args.added_by)
    print(
        "Seed complete. "
        f"tables_created={result['created_tables']} "
        f"admins_added={result['admins_added']} "
        f"admins_existing={result['admins_existing']}"
    )
    return result


if __name__ == "__main__":
    main()
