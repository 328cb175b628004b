# routers/deals.py

from fastapi import APIRouter, Depends, HTTPException, Query, status

from authentication.authorization import EffectiveIdentity
from authentication.deps import get_current_user, get_optional_user
from db.deps import get_store
from db.tabular_store import TabularStore
from models.deals import DEAL_STATUSES, OWNER_COLUMN, REVIEW_STATUSES
from models.requests import DealCreateRequest, DealStatusRequest, DuplicateCheckRequest
from services import deal_service
from services.ownership import can_view

router = APIRouter(prefix="/deals", tags=["deals"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_deal(
    payload: DealCreateRequest,
    store: TabularStore = Depends(get_store),
    current_user: EffectiveIdentity = Depends(get_current_user),
):
    if not payload.agreed_to_terms:
        raise HTTPException(status_code=400, detail="Must agree to terms and conditions")

    duplicates = deal_service.find_duplicates(store, payload.company_name, payload.domain)
    if duplicates:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "Potential duplicate deal detected",
                "duplicates": duplicates,
                "message": "Please review existing deals or contact your partner manager",
            },
        )

    deal = deal_service.create_deal(store, payload.deal_fields(), current_user)
    return {
        "message": "Deal registration submitted successfully",
        "dealId": deal["id"],
        "status": deal["status"],
        "estimatedApprovalTime": deal_service.estimated_approval_time(payload.deal_value),
        "nextSteps": [
            "Deal submitted for review",
            "You will receive an email confirmation shortly",
            "Approval typically takes 24-48 hours",
            "Contact your partner manager for urgent requests",
        ],
    }


@router.get("")
def list_deals(
    status_filter: str | None = Query(None, alias="status"),
    partner: str | None = Query(None),
    limit: int = Query(50, ge=1, le=1000),
    store: TabularStore = Depends(get_store),
    current_user: EffectiveIdentity = Depends(get_current_user),
):
    deals = deal_service.list_deals(
        store, current_user, status=status_filter, partner=partner, limit=limit
    )
    return {
        "deals": deals,
        "total": len(deals),
        "filters": {"status": status_filter, "partner": partner, "limit": limit},
        "user": {"email": current_user.email, "role": current_user.effective_role},
    }


@router.get("/my-deals")
def my_deals(
    status_filter: str | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=1000),
    store: TabularStore = Depends(get_store),
    current_user: EffectiveIdentity = Depends(get_current_user),
):
    deals = deal_service.list_deals(
        store, current_user, status=status_filter, limit=limit, mine_only=True
    )
    return {
        "deals": deals,
        "total": len(deals),
        "filters": {"status": status_filter, "limit": limit},
        "user": {"email": current_user.email, "role": current_user.effective_role},
    }


@router.get("/stats/summary")
def stats_summary(
    store: TabularStore = Depends(get_store),
    current_user: EffectiveIdentity = Depends(get_current_user),
):
    return deal_service.deal_stats(store, current_user)


@router.post("/check-duplicate")
def check_duplicate(
    payload: DuplicateCheckRequest,
    store: TabularStore = Depends(get_store),
    current_user: EffectiveIdentity | None = Depends(get_optional_user),
):
    duplicates = deal_service.find_duplicates(store, payload.company_name, payload.domain)
    return {
        "hasDuplicates": bool(duplicates),
        "duplicates": duplicates,
        "message": "Potential duplicates found" if duplicates else "No duplicates detected",
        "checkedBy": current_user.email if current_user else None,
    }


@router.get("/{deal_id}")
def get_deal(
    deal_id: str,
    store: TabularStore = Depends(get_store),
    current_user: EffectiveIdentity = Depends(get_current_user),
):
    deal = deal_service.get_deal(store, deal_id)
    if deal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deal not found")
    if not can_view(deal, current_user, OWNER_COLUMN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only view deals you submitted",
        )
    return {"deal": deal, "message": "Deal retrieved successfully"}


@router.put("/{deal_id}/status")
def update_status(
    deal_id: str,
    payload: DealStatusRequest,
    store: TabularStore = Depends(get_store),
    current_user: EffectiveIdentity = Depends(get_current_user),
):
    if payload.status not in DEAL_STATUSES:
        raise HTTPException(
            status_code=400,
            detail={"error": "Invalid status", "validStatuses": list(DEAL_STATUSES)},
        )

    deal = deal_service.get_deal(store, deal_id)
    if deal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deal not found")
    if not can_view(deal, current_user, OWNER_COLUMN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update deals you submitted",
        )
    if payload.status in REVIEW_STATUSES and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required to approve or reject deals",
        )

    updated = deal_service.update_deal_status(
        store,
        deal_id,
        payload.status,
        current_user,
        rejection_reason=payload.rejection_reason,
    )
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deal not found")
    return {
        "message": "Deal status updated",
        "dealId": deal_id,
        "newStatus": updated["status"],
        "updatedBy": current_user.email,
        "deal": updated,
    }
