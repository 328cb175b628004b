import pytest

from authentication.authorization import EffectiveIdentity
from models.audit_log import ACTION_CREATED, ACTION_STATUS_CHANGED, AUDIT_LOG_TABLE
from models.deals import DEALS_TABLE, STATUS_APPROVED, STATUS_REJECTED, STATUS_SUBMITTED
from services import deal_service


def _identity(email: str, role: str = "user", affiliation: str = "Acme") -> EffectiveIdentity:
    return EffectiveIdentity(
        id="id-" + email,
        email=email,
        first_name="Pat",
        last_name="Partner",
        affiliation=affiliation,
        claimed_role="user",
        effective_role=role,
    )


ANN = _identity("ann@acme.com")
BO = _identity("bo@other.com", affiliation="Other Co")
ADMIN = _identity("boss@daxa.ai", role="admin")


def _deal(store, submitter, company="Globex", domain="globex.com", **extra):
    fields = {"company_name": company, "domain": domain, **extra}
    return deal_service.create_deal(store, fields, submitter)


@pytest.mark.parametrize(
    "raw, expected",
    [("$250,000", 250000.0), ("1200.50", 1200.5), ("", 0.0), (None, 0.0), ("n/a", 0.0), ("1.2.3", 0.0)],
)
def test_parse_deal_value(raw, expected) -> None:
    assert deal_service.parse_deal_value(raw) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("$750,000", "3-5 business days"),
        ("500000", "3-5 business days"),
        ("100000", "2-3 business days"),
        ("99,999", "1-2 business days"),
        (None, "1-2 business days"),
    ],
)
def test_estimated_approval_time_tiers(value, expected) -> None:
    assert deal_service.estimated_approval_time(value) == expected


def test_create_deal_sets_system_fields_and_audits(store) -> None:
    deal = _deal(store, ANN, deal_value="$10,000", submitter_email="spoof@evil.com", status="approved")

    assert deal["status"] == STATUS_SUBMITTED
    assert deal["submitter_email"] == "ann@acme.com"
    assert deal["submitter_name"] == "Pat Partner"
    assert deal["partner_company"] == "Acme"
    assert deal["created_at"] and deal["created_at"] == deal["updated_at"]
    assert store.find_by_column(DEALS_TABLE, "id", deal["id"]) == deal

    audit = store.get_all(AUDIT_LOG_TABLE)
    assert len(audit) == 1
    assert audit[0]["deal_id"] == deal["id"]
    assert audit[0]["action"] == ACTION_CREATED
    assert audit[0]["user_email"] == "ann@acme.com"


def test_find_duplicates_ignores_case_and_rejected_deals(store) -> None:
    kept = _deal(store, ANN, company="Globex", domain="globex.com")
    rejected = _deal(store, BO, company="Initech", domain="initech.com")
    deal_service.update_deal_status(store, rejected["id"], STATUS_REJECTED, ADMIN)

    by_company = deal_service.find_duplicates(store, "  GLOBEX ", "new.com")
    by_domain = deal_service.find_duplicates(store, "Other", "Globex.COM")

    assert [d["id"] for d in by_company] == [kept["id"]]
    assert [d["id"] for d in by_domain] == [kept["id"]]
    assert deal_service.find_duplicates(store, "Initech", "initech.com") == []


def test_list_deals_filters_by_owner_unless_admin(store) -> None:
    a1 = _deal(store, ANN, company="A1", domain="a1.com")
    b1 = _deal(store, BO, company="B1", domain="b1.com")
    a2 = _deal(store, ANN, company="A2", domain="a2.com")

    assert [d["id"] for d in deal_service.list_deals(store, ANN)] == [a1["id"], a2["id"]]
    assert [d["id"] for d in deal_service.list_deals(store, ADMIN)] == [a1["id"], b1["id"], a2["id"]]
    assert deal_service.list_deals(store, None) == []
    assert deal_service.list_deals(store, ADMIN, mine_only=True) == []


def test_list_deals_limit_applies_after_filtering(store) -> None:
    for i in range(3):
        _deal(store, BO, company=f"B{i}", domain=f"b{i}.com")
    mine = _deal(store, ANN, company="A", domain="a.com")

    assert [d["id"] for d in deal_service.list_deals(store, ANN, limit=1)] == [mine["id"]]
    assert len(deal_service.list_deals(store, ADMIN, limit=2)) == 2


def test_list_deals_status_and_partner_filters(store) -> None:
    a = _deal(store, ANN, company="A", domain="a.com")
    b = _deal(store, BO, company="B", domain="b.com")
    deal_service.update_deal_status(store, a["id"], STATUS_APPROVED, ADMIN)

    approved = deal_service.list_deals(store, ADMIN, status=STATUS_APPROVED)
    other_co = deal_service.list_deals(store, ADMIN, partner="Other Co")

    assert [d["id"] for d in approved] == [a["id"]]
    assert [d["id"] for d in other_co] == [b["id"]]


def test_update_status_records_review_and_audit(store) -> None:
    deal = _deal(store, ANN)

    updated = deal_service.update_deal_status(
        store,
        deal["id"],
        STATUS_REJECTED,
        ADMIN,
        reviewer_name="Dana Reviewer",
        rejection_reason="Existing customer",
    )

    assert updated["status"] == STATUS_REJECTED
    assert updated["reviewed_by"] == "Dana Reviewer"
    assert updated["rejection_reason"] == "Existing customer"
    assert deal_service.get_deal(store, deal["id"]) == updated

    audit = store.get_all(AUDIT_LOG_TABLE)
    assert audit[-1]["action"] == ACTION_STATUS_CHANGED
    assert audit[-1]["notes"] == "Status changed to rejected: Existing customer"
    assert audit[-1]["user_email"] == "boss@daxa.ai"


def test_update_status_of_missing_deal(store) -> None:
    assert deal_service.update_deal_status(store, "nope", STATUS_APPROVED, ADMIN) is None
    assert store.get_all(AUDIT_LOG_TABLE) == []


def test_pending_deals(store) -> None:
    a = _deal(store, ANN, company="A", domain="a.com")
    b = _deal(store, BO, company="B", domain="b.com")
    deal_service.update_deal_status(store, b["id"], STATUS_APPROVED, ADMIN)

    assert [d["id"] for d in deal_service.pending_deals(store)] == [a["id"]]


def test_deal_stats_counts_visible_deals(store) -> None:
    a = _deal(store, ANN, company="A", domain="a.com", deal_value="$100,000")
    _deal(store, ANN, company="A2", domain="a2.com", deal_value="50000")
    _deal(store, BO, company="B", domain="b.com", deal_value="1000")
    deal_service.update_deal_status(store, a["id"], STATUS_APPROVED, ADMIN)

    mine = deal_service.deal_stats(store, ANN)
    everything = deal_service.deal_stats(store, ADMIN)

    assert mine == {
        "total": 2,
        "pending": 0,
        "approved": 1,
        "rejected": 0,
        "submitted": 1,
        "totalValue": 150000.0,
    }
    assert everything["total"] == 3
    assert everything["totalValue"] == 151000.0
