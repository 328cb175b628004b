# routers/admin.py

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status

from authentication.authorization import EffectiveIdentity
from authentication.deps import get_current_user, require_admin
from authentication.repository import list_users, update_user_status
from authentication.schemas import UserStatusRequest
from db.deps import get_store
from db.tabular_store import TabularStore
from models.deals import STATUS_APPROVED, STATUS_REJECTED
from models.profiles import DEFAULT_TERRITORY, ProfileColumns
from models.requests import AdminEmailRequest, ProfileUpdateRequest, ReviewRequest
from services import deal_service
from services.admin_service import AdminAlreadyExists, add_admin, list_admins, remove_admin
from services.profile_service import get_profile, upsert_profile

router = APIRouter(prefix="/admin", tags=["admin"])


# --------------------------------------------------
# PROFILE (any authenticated user)
# --------------------------------------------------
@router.get("/profile")
def read_profile(
    store: TabularStore = Depends(get_store),
    current_user: EffectiveIdentity = Depends(get_current_user),
):
    profile = get_profile(store, current_user.email) or {}
    return {
        "profile": {
            "firstName": current_user.first_name,
            "lastName": current_user.last_name,
            "email": current_user.email,
            "partner_company": profile.get(ProfileColumns.COMPANY_NAME) or current_user.affiliation,
            "role": current_user.effective_role,
            "territory": profile.get(ProfileColumns.TERRITORY) or DEFAULT_TERRITORY,
            "company_description": profile.get(ProfileColumns.COMPANY_DESCRIPTION, ""),
            "company_size": profile.get(ProfileColumns.COMPANY_SIZE, ""),
            "website_url": profile.get(ProfileColumns.WEBSITE_URL, ""),
            "updated_at": profile.get(ProfileColumns.UPDATED_AT) or None,
        },
        "sources": {"profileData": "found" if profile else "not_found"},
    }


@router.put("/profile")
def update_profile(
    payload: ProfileUpdateRequest,
    store: TabularStore = Depends(get_store),
    current_user: EffectiveIdentity = Depends(get_current_user),
):
    updates = payload.model_dump(exclude={"company"})
    updates[ProfileColumns.COMPANY_NAME] = payload.company
    row, created = upsert_profile(store, current_user.email, updates)
    return {
        "message": "Profile created successfully" if created else "Profile updated successfully",
        "email": current_user.email,
        "profile": row,
    }


@router.get("/profile/deals")
def profile_deals(
    store: TabularStore = Depends(get_store),
    current_user: EffectiveIdentity = Depends(get_current_user),
):
    # own deals only, admins included
    deals = deal_service.list_deals(store, current_user, limit=10000, mine_only=True)
    return {"deals": deals, "total": len(deals), "user_email": current_user.email}


# --------------------------------------------------
# DEAL REVIEW
# --------------------------------------------------
@router.get("/pending-deals")
def pending_deals(
    store: TabularStore = Depends(get_store),
    _: EffectiveIdentity = Depends(require_admin),
):
    deals = deal_service.pending_deals(store)
    return {"deals": deals, "total": len(deals)}


def _review(store: TabularStore, deal_id: str, new_status: str, payload: ReviewRequest, admin):
    updated = deal_service.update_deal_status(
        store,
        deal_id,
        new_status,
        admin,
        reviewer_name=payload.approver_name,
        rejection_reason=payload.rejection_reason if new_status == STATUS_REJECTED else None,
    )
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deal not found")
    return updated


@router.post("/deals/{deal_id}/approve")
def approve_deal(
    deal_id: str,
    payload: ReviewRequest,
    store: TabularStore = Depends(get_store),
    admin: EffectiveIdentity = Depends(require_admin),
):
    deal = _review(store, deal_id, STATUS_APPROVED, payload, admin)
    return {
        "message": "Deal approved successfully",
        "dealId": deal_id,
        "status": deal["status"],
        "approver": deal.get("reviewed_by", ""),
        "approved_at": deal.get("updated_at", ""),
    }


@router.post("/deals/{deal_id}/reject")
def reject_deal(
    deal_id: str,
    payload: ReviewRequest,
    store: TabularStore = Depends(get_store),
    admin: EffectiveIdentity = Depends(require_admin),
):
    deal = _review(store, deal_id, STATUS_REJECTED, payload, admin)
    return {
        "message": "Deal rejected successfully",
        "dealId": deal_id,
        "status": deal["status"],
        "approver": deal.get("reviewed_by", ""),
        "rejection_reason": deal.get("rejection_reason", ""),
        "rejected_at": deal.get("updated_at", ""),
    }


# --------------------------------------------------
# ADMIN ALLOWLIST
# --------------------------------------------------
@router.post("/add")
def add(
    payload: AdminEmailRequest,
    store: TabularStore = Depends(get_store),
    admin: EffectiveIdentity = Depends(require_admin),
):
    if not payload.email.strip():
        raise HTTPException(status_code=400, detail="Please provide a valid email address")
    try:
        entry = add_admin(store, payload.email, admin.email)
    except AdminAlreadyExists:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This email is already in the admin list",
        )
    return {
        "message": "Admin added successfully",
        "email": entry.email,
        "added_by": entry.added_by,
        "added_at": entry.added_at,
    }


@router.get("/list")
def list_allowlist(
    store: TabularStore = Depends(get_store),
    _: EffectiveIdentity = Depends(require_admin),
):
    admins = [asdict(entry) for entry in list_admins(store)]
    return {"admins": admins, "total": len(admins)}


@router.post("/remove")
def remove(
    payload: AdminEmailRequest,
    store: TabularStore = Depends(get_store),
    admin: EffectiveIdentity = Depends(require_admin),
):
    email = payload.email.strip()
    if email.lower() == admin.email.lower():
        raise HTTPException(status_code=400, detail="You cannot remove your own admin privileges")
    if not remove_admin(store, email):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admin not found")
    return {"message": "Admin removed", "email": email, "removed_by": admin.email}


# --------------------------------------------------
# USERS
# --------------------------------------------------
@router.get("/users")
def users(
    search: str | None = None,
    limit: int = Query(100, ge=1, le=500),
    store: TabularStore = Depends(get_store),
    _: EffectiveIdentity = Depends(require_admin),
):
    return {"users": [asdict(u) for u in list_users(store, search=search, limit=limit)]}


@router.patch("/users/{user_id}/status")
def set_user_status(
    user_id: str,
    payload: UserStatusRequest,
    store: TabularStore = Depends(get_store),
    admin: EffectiveIdentity = Depends(require_admin),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot change your own status")
    if not update_user_status(store, user_id, payload.status):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"updated": True, "id": user_id, "status": payload.status}
