import logging
import re
import uuid
from typing import Any, Mapping

from authentication.authorization import EffectiveIdentity
from authentication.repository import utc_timestamp
from db.tabular_store import Row, TabularStore
from models.audit_log import (
    ACTION_CREATED,
    ACTION_STATUS_CHANGED,
    AUDIT_HEADER,
    AUDIT_LOG_TABLE,
    AuditColumns,
)
from models.deals import (
    DEAL_HEADER,
    DEALS_TABLE,
    OWNER_COLUMN,
    PENDING_STATUSES,
    STATUS_APPROVED,
    STATUS_REJECTED,
    STATUS_SUBMITTED,
    STATUS_UNDER_REVIEW,
    DealColumns,
)
from services.ownership import owned_rows, visible_rows

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9.]")


def parse_deal_value(raw: str | None) -> float:
    """'$250,000' -> 250000.0; anything unparseable counts as 0."""
    cleaned = _NON_NUMERIC.sub("", raw or "")
    try:
        return float(cleaned) if cleaned else 0.0
    except ValueError:
        return 0.0


def estimated_approval_time(deal_value: str | None) -> str:
    value = parse_deal_value(deal_value)
    if value >= 500000:
        return "3-5 business days"
    if value >= 100000:
        return "2-3 business days"
    return "1-2 business days"


def find_duplicates(store: TabularStore, company_name: str, domain: str) -> list[Row]:
    """Non-rejected deals whose company name or domain matches, ignoring case."""
    company_key = (company_name or "").strip().lower()
    domain_key = (domain or "").strip().lower()
    duplicates = []
    for deal in store.get_all(DEALS_TABLE):
        if deal.get(DealColumns.STATUS, "") == STATUS_REJECTED:
            continue
        existing_company = deal.get(DealColumns.COMPANY_NAME, "").strip().lower()
        existing_domain = deal.get(DealColumns.DOMAIN, "").strip().lower()
        if (company_key and existing_company == company_key) or (
            domain_key and existing_domain == domain_key
        ):
            duplicates.append(deal)
    return duplicates


def append_audit(
    store: TabularStore,
    deal_id: str,
    user_email: str,
    action: str,
    notes: str,
) -> None:
    store.ensure_header(AUDIT_LOG_TABLE, AUDIT_HEADER)
    store.append_mapping(
        AUDIT_LOG_TABLE,
        {
            AuditColumns.ID: uuid.uuid4().hex,
            AuditColumns.DEAL_ID: deal_id,
            AuditColumns.USER_EMAIL: user_email,
            AuditColumns.ACTION: action,
            AuditColumns.TIMESTAMP: utc_timestamp(),
            AuditColumns.NOTES: notes,
        },
    )


def create_deal(
    store: TabularStore,
    fields: Mapping[str, Any],
    submitter: EffectiveIdentity,
) -> Row:
    """Append a new deal owned by ``submitter``.

    ``fields`` is keyed by Deals column names; id, status, timestamps and the
    owner email are always set here.
    """
    deal_id = uuid.uuid4().hex
    now = utc_timestamp()

    row: dict[str, str] = {name: "" for name in DEAL_HEADER}
    for name, value in fields.items():
        if name in row and value is not None:
            row[name] = str(value)
    row[DealColumns.ID] = deal_id
    row[DealColumns.STATUS] = STATUS_SUBMITTED
    row[DealColumns.CREATED_AT] = now
    row[DealColumns.UPDATED_AT] = now
    row[OWNER_COLUMN] = submitter.email
    if not row[DealColumns.SUBMITTER_NAME]:
        row[DealColumns.SUBMITTER_NAME] = f"{submitter.first_name} {submitter.last_name}".strip()
    if not row[DealColumns.PARTNER_COMPANY]:
        row[DealColumns.PARTNER_COMPANY] = submitter.affiliation

    store.ensure_header(DEALS_TABLE, DEAL_HEADER)
    store.append_mapping(DEALS_TABLE, row)
    append_audit(
        store,
        deal_id,
        submitter.email,
        ACTION_CREATED,
        f"Deal created for {row[DealColumns.COMPANY_NAME]}",
    )
    logger.info("Deal %s created by %s", deal_id, submitter.email)
    return row


def list_deals(
    store: TabularStore,
    caller: EffectiveIdentity | None,
    *,
    status: str | None = None,
    partner: str | None = None,
    limit: int = 50,
    mine_only: bool = False,
) -> list[Row]:
    rows = store.get_all(DEALS_TABLE)
    if mine_only:
        deals = owned_rows(rows, caller.email if caller else "", OWNER_COLUMN)
    else:
        deals = visible_rows(rows, caller, OWNER_COLUMN)

    if status:
        deals = [d for d in deals if d.get(DealColumns.STATUS, "") == status]
    if partner:
        deals = [d for d in deals if d.get(DealColumns.PARTNER_COMPANY, "") == partner]
    return deals[: max(0, limit)]


def get_deal(store: TabularStore, deal_id: str) -> Row | None:
    return store.find_by_column(DEALS_TABLE, DealColumns.ID, deal_id)


def pending_deals(store: TabularStore) -> list[Row]:
    return [
        d
        for d in store.get_all(DEALS_TABLE)
        if d.get(DealColumns.STATUS, "").lower() in PENDING_STATUSES
    ]


def update_deal_status(
    store: TabularStore,
    deal_id: str,
    new_status: str,
    actor: EffectiveIdentity,
    *,
    reviewer_name: str | None = None,
    rejection_reason: str | None = None,
) -> Row | None:
    """Persist a status change and log it. Returns None if the deal is gone."""
    changes: dict[str, str] = {
        DealColumns.STATUS: new_status,
        DealColumns.UPDATED_AT: utc_timestamp(),
    }
    if new_status in (STATUS_APPROVED, STATUS_REJECTED):
        changes[DealColumns.REVIEWED_BY] = reviewer_name or actor.email
    if new_status == STATUS_REJECTED:
        changes[DealColumns.REJECTION_REASON] = rejection_reason or ""

    updated = store.update_where(DEALS_TABLE, DealColumns.ID, deal_id, changes)
    if updated is None:
        return None

    notes = f"Status changed to {new_status}"
    if rejection_reason:
        notes += f": {rejection_reason}"
    append_audit(store, deal_id, actor.email, ACTION_STATUS_CHANGED, notes)
    logger.info("Deal %s set to %s by %s", deal_id, new_status, actor.email)
    return updated


def deal_stats(store: TabularStore, caller: EffectiveIdentity | None) -> dict[str, float]:
    stats: dict[str, float] = {
        "total": 0,
        "pending": 0,
        "approved": 0,
        "rejected": 0,
        "submitted": 0,
        "totalValue": 0,
    }
    for deal in visible_rows(store.get_all(DEALS_TABLE), caller, OWNER_COLUMN):
        stats["total"] += 1
        stats["totalValue"] += parse_deal_value(deal.get(DealColumns.DEAL_VALUE, ""))

        status = deal.get(DealColumns.STATUS, "").lower()
        if status in ("pending", STATUS_UNDER_REVIEW):
            stats["pending"] += 1
        elif status == STATUS_APPROVED:
            stats["approved"] += 1
        elif status == STATUS_REJECTED:
            stats["rejected"] += 1
        elif status == STATUS_SUBMITTED:
            stats["submitted"] += 1
    return stats
