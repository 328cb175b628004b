import json
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse

from db.deps import get_store
from db.tabular_store import TabularStore
from authentication import google_oauth
from authentication.authorization import EffectiveIdentity, is_admin
from authentication.deps import get_current_user
from authentication.errors import MissingEmail, OAuthError, UserAlreadyExists
from authentication.identity import ExternalIdentity, register_user, resolve_or_create
from authentication.local_users import use_local_auth, verify_local_user
from authentication.repository import get_password_hash, get_user_by_email
from authentication.schemas import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from authentication.security import hash_password, issue_token, verify_password
from models.users import ROLE_ADMIN, User
from services.profile_service import upsert_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_payload(user: User, role: str | None = None) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": role or user.role,
        "partner_id": user.affiliation,
        "partner_name": user.affiliation,
    }


def _login_response(store: TabularStore, user: User, message: str) -> dict:
    role = ROLE_ADMIN if is_admin(store, user.email) else user.role
    return {
        "message": message,
        "access_token": issue_token(user),
        "token_type": "bearer",
        "user": _user_payload(user, role),
    }


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, store: TabularStore = Depends(get_store)):
    try:
        user = register_user(
            store,
            ExternalIdentity(
                email=payload.email,
                given_name=payload.first_name,
                family_name=payload.last_name,
            ),
            hash_password(payload.password),
            affiliation=payload.company,
        )
    except UserAlreadyExists:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")
    if payload.territory:
        upsert_profile(
            store,
            user.email,
            {"territory": payload.territory, "company_name": payload.company},
        )

    logger.info("Registered user %s", user.email)
    return _login_response(store, user, "User registered successfully")


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, store: TabularStore = Depends(get_store)):
    password_hash = get_password_hash(store, payload.email)
    if not password_hash or not verify_password(payload.password, password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user = get_user_by_email(store, payload.email)
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return _login_response(store, user, "Login successful")


@router.post("/email-login", response_model=LoginResponse)
def email_login(payload: LoginRequest, store: TabularStore = Depends(get_store)):
    if not use_local_auth():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    local_user = verify_local_user(payload.email, payload.password)
    if local_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user = resolve_or_create(
        store,
        ExternalIdentity(
            email=local_user.email,
            given_name=local_user.first_name,
            family_name=local_user.last_name,
        ),
        affiliation=local_user.affiliation,
        role=local_user.role,
    )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _login_response(store, user, "Login successful")


@router.get("/google")
def google_start():
    if not google_oauth.oauth_configured():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google auth is not configured",
        )
    return RedirectResponse(google_oauth.authorization_url(google_oauth.make_state()))


@router.get("/google/callback")
def google_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    store: TabularStore = Depends(get_store),
):
    if error:
        return RedirectResponse(google_oauth.frontend_redirect({"error": error}))
    if not code or not google_oauth.check_state(state):
        return RedirectResponse(google_oauth.frontend_redirect({"error": "invalid_state"}))

    try:
        identity = google_oauth.fetch_identity(code)
        user = resolve_or_create(store, identity)
    except MissingEmail:
        logger.error("Google profile carried no email")
        return RedirectResponse(google_oauth.frontend_redirect({"error": "missing_email"}))
    except OAuthError:
        logger.exception("Google callback failed")
        return RedirectResponse(google_oauth.frontend_redirect({"error": "google_auth_failed"}))

    if not user.is_active:
        return RedirectResponse(google_oauth.frontend_redirect({"error": "user_inactive"}))

    body = _login_response(store, user, "Login successful")
    return RedirectResponse(
        google_oauth.frontend_redirect(
            {
                "token": body["access_token"],
                "user": json.dumps(UserResponse(**body["user"]).model_dump(by_alias=True)),
            }
        )
    )


@router.get("/me", response_model=UserResponse)
def me(current_user: EffectiveIdentity = Depends(get_current_user)):
    return {
        "id": current_user.id,
        "email": current_user.email,
        "first_name": current_user.first_name,
        "last_name": current_user.last_name,
        "role": current_user.effective_role,
        "partner_id": current_user.affiliation,
        "partner_name": current_user.affiliation,
    }


@router.post("/logout")
def logout():
    return {"message": "Logout successful", "note": "Clear the token on frontend"}
