"""Google OAuth 2.0 authorization-code glue.

Only turns a callback ``code`` into an ExternalIdentity; user creation and
token issuance happen in the router. The ``state`` round-trip is a short-lived
JWT signed with the session secret, so no server-side storage is needed.
"""

import logging
import os
import secrets
from datetime import timedelta
from urllib.parse import urlencode

import requests
from dotenv import load_dotenv

from authentication.errors import OAuthError, TokenInvalid
from authentication.identity import ExternalIdentity
from authentication.security import create_access_token, decode_token

load_dotenv()

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "")
GOOGLE_CALLBACK_URL = os.getenv(
    "GOOGLE_CALLBACK_URL", "http://localhost:5000/api/v1/auth/google/callback"
)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:8080").rstrip("/")
OAUTH_HTTP_TIMEOUT_SECONDS = int(os.getenv("OAUTH_HTTP_TIMEOUT_SECONDS", "10"))

_STATE_PURPOSE = "google_oauth_state"
_STATE_TTL = timedelta(minutes=10)


def oauth_configured() -> bool:
    return bool(GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET)


def make_state() -> str:
    return create_access_token(
        {"purpose": _STATE_PURPOSE, "nonce": secrets.token_urlsafe(16)},
        expires_delta=_STATE_TTL,
    )


def check_state(state: str | None) -> bool:
    if not state:
        return False
    try:
        payload = decode_token(state)
    except TokenInvalid:
        return False
    return payload.get("purpose") == _STATE_PURPOSE


def authorization_url(state: str) -> str:
    params = {
        "client_id": GOOGLE_CLIENT_ID,
        "redirect_uri": GOOGLE_CALLBACK_URL,
        "response_type": "code",
        "scope": "openid email profile",
        "state": state,
        "prompt": "select_account",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def fetch_identity(code: str) -> ExternalIdentity:
    """Exchange an authorization code and read the user's profile."""
    try:
        token_resp = requests.post(
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": GOOGLE_CLIENT_ID,
                "client_secret": GOOGLE_CLIENT_SECRET,
                "redirect_uri": GOOGLE_CALLBACK_URL,
                "grant_type": "authorization_code",
            },
            timeout=OAUTH_HTTP_TIMEOUT_SECONDS,
        )
        if token_resp.status_code != 200:
            raise OAuthError(f"Token exchange failed ({token_resp.status_code})")

        access_token = token_resp.json().get("access_token")
        if not access_token:
            raise OAuthError("Token exchange returned no access_token")

        info_resp = requests.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=OAUTH_HTTP_TIMEOUT_SECONDS,
        )
        if info_resp.status_code != 200:
            raise OAuthError(f"Userinfo request failed ({info_resp.status_code})")
        profile = info_resp.json()
    except requests.RequestException as exc:
        logger.error("Google OAuth request failed: %s", exc)
        raise OAuthError(str(exc)) from exc
    except ValueError as exc:
        raise OAuthError("Google returned a non-JSON response") from exc

    return ExternalIdentity(
        email=profile.get("email"),
        given_name=profile.get("given_name"),
        family_name=profile.get("family_name"),
        external_id=profile.get("sub"),
    )


def frontend_redirect(params: dict[str, str]) -> str:
    path = "/auth/callback" if "token" in params else "/auth"
    return f"{FRONTEND_URL}{path}?{urlencode(params)}"
