# models/deals.py

DEALS_TABLE = "Deals"

STATUS_SUBMITTED = "submitted"
STATUS_UNDER_REVIEW = "under_review"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

DEAL_STATUSES = (STATUS_SUBMITTED, STATUS_UNDER_REVIEW, STATUS_APPROVED, STATUS_REJECTED)
# "pending" shows up in hand-edited sheets, treat it like under_review
PENDING_STATUSES = ("submitted", "pending", "under_review")
REVIEW_STATUSES = (STATUS_APPROVED, STATUS_REJECTED)


class DealColumns:
    ID = "id"
    STATUS = "status"
    CREATED_AT = "created_at"
    COMPANY_NAME = "company_name"
    DOMAIN = "domain"
    PARTNER_COMPANY = "partner_company"
    SUBMITTER_NAME = "submitter_name"
    SUBMITTER_EMAIL = "submitter_email"
    TERRITORY = "territory"
    CUSTOMER_INDUSTRY = "customer_industry"
    CUSTOMER_LOCATION = "customer_location"
    DEAL_STAGE = "deal_stage"
    EXPECTED_CLOSE_DATE = "expected_close_date"
    DEAL_VALUE = "deal_value"
    CONTRACT_TYPE = "contract_type"
    PRIMARY_PRODUCT = "primary_product"
    ADDITIONAL_NOTES = "additional_notes"
    CUSTOMER_LEGAL_NAME = "customer_legal_name"
    UPDATED_AT = "updated_at"
    REVIEWED_BY = "reviewed_by"
    REJECTION_REASON = "rejection_reason"


# rows are filtered for non-admins on this column
OWNER_COLUMN = DealColumns.SUBMITTER_EMAIL

DEAL_HEADER = [
    DealColumns.ID,
    DealColumns.STATUS,
    DealColumns.CREATED_AT,
    DealColumns.COMPANY_NAME,
    DealColumns.DOMAIN,
    DealColumns.PARTNER_COMPANY,
    DealColumns.SUBMITTER_NAME,
    DealColumns.SUBMITTER_EMAIL,
    DealColumns.TERRITORY,
    DealColumns.CUSTOMER_INDUSTRY,
    DealColumns.CUSTOMER_LOCATION,
    DealColumns.DEAL_STAGE,
    DealColumns.EXPECTED_CLOSE_DATE,
    DealColumns.DEAL_VALUE,
    DealColumns.CONTRACT_TYPE,
    DealColumns.PRIMARY_PRODUCT,
    DealColumns.ADDITIONAL_NOTES,
    DealColumns.CUSTOMER_LEGAL_NAME,
    DealColumns.UPDATED_AT,
    DealColumns.REVIEWED_BY,
    DealColumns.REJECTION_REASON,
]
