from pydantic import BaseModel, Field

from authentication.schemas import CamelModel


class DealCreateRequest(CamelModel):
    # Quick Check
    company_name: str = Field(..., min_length=1)
    domain: str = Field(..., min_length=1)

    # Core Info
    partner_company: str | None = None
    submitter_name: str | None = None
    territory: str | None = None
    customer_legal_name: str | None = None
    customer_industry: str | None = None
    customer_location: str | None = None

    # Deal Intelligence
    deal_stage: str | None = None
    expected_close_date: str | None = None
    deal_value: str | None = None
    contract_type: str | None = None
    primary_product: str | None = None

    # Documentation
    additional_notes: str | None = None
    agreed_to_terms: bool = False

    def deal_fields(self) -> dict[str, str | None]:
        return self.model_dump(exclude={"agreed_to_terms"})


class DuplicateCheckRequest(CamelModel):
    company_name: str = Field(..., min_length=1)
    domain: str = Field(..., min_length=1)


class DealStatusRequest(CamelModel):
    status: str
    rejection_reason: str | None = None


class ReviewRequest(BaseModel):
    approver_name: str | None = None
    rejection_reason: str | None = None


class AdminEmailRequest(BaseModel):
    email: str = Field(..., min_length=3)


class ProfileUpdateRequest(BaseModel):
    territory: str | None = None
    company_description: str | None = None
    company_size: str | None = None
    website_url: str | None = None
    company: str | None = None
