from datetime import timedelta

import pytest

from authentication.authorization import is_admin, optional_verify, verify_and_resolve
from authentication.errors import TokenExpired, TokenInvalid, UserInactive, UserNotFound
from authentication.repository import update_user_status
from authentication.security import (
    create_access_token,
    decode_token,
    hash_password,
    issue_token,
    verify_password,
)
from db.errors import StoreUnavailable
from db.tabular_store import TabularStore
from models.admins import ADMINS_TABLE
from models.users import ROLE_ADMIN, ROLE_USER, STATUS_INACTIVE, User
from services.admin_service import add_admin, remove_admin


class _AllowlistDown:
    """Delegating backend whose Admins sheet cannot be read."""

    def __init__(self, inner):
        self._inner = inner

    def get_grid(self, table):
        if table == ADMINS_TABLE:
            raise StoreUnavailable("Admins sheet unreachable")
        return self._inner.get_grid(table)

    def __getattr__(self, name):
        return getattr(self._inner, name)


def test_password_hashing_round_trip() -> None:
    hashed = hash_password("s3cret-pass")

    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed) is True
    assert verify_password("wrong", hashed) is False
    assert verify_password("s3cret-pass", "not-a-hash") is False


def test_issue_token_claims() -> None:
    user = User(
        id="u1", email="a@b.com", first_name="A", last_name="B",
        affiliation="Acme", role=ROLE_USER, status="active",
    )

    claims = decode_token(issue_token(user))

    assert claims["sub"] == "u1"
    assert claims["email"] == "a@b.com"
    assert claims["role"] == ROLE_USER
    assert claims["affiliation"] == "Acme"
    assert claims["exp"] - claims["iat"] == 24 * 3600


def test_decode_rejects_expired_and_tampered_tokens() -> None:
    expired = create_access_token({"sub": "u1"}, expires_delta=timedelta(seconds=-5))
    forged = create_access_token({"sub": "u1"}, secret="another-secret")

    with pytest.raises(TokenExpired):
        decode_token(expired)
    with pytest.raises(TokenInvalid):
        decode_token(forged)
    with pytest.raises(TokenInvalid):
        decode_token("not.a.jwt")


def test_is_admin_is_case_insensitive(store) -> None:
    add_admin(store, "Boss@Example.org", "tests")

    assert is_admin(store, "boss@example.org") is True
    assert is_admin(store, "BOSS@EXAMPLE.ORG") is True
    assert is_admin(store, "other@example.org") is False
    assert is_admin(store, "") is False


def test_inactive_allowlist_entry_is_not_admin(store) -> None:
    add_admin(store, "boss@example.org", "tests")
    remove_admin(store, "boss@example.org")

    assert is_admin(store, "boss@example.org") is False


def test_is_admin_false_when_allowlist_unreadable(store, backend) -> None:
    add_admin(store, "boss@example.org", "tests")
    broken = TabularStore(_AllowlistDown(backend))

    assert is_admin(broken, "boss@example.org") is False


def test_effective_role_is_recomputed_per_request(store, make_user) -> None:
    user, headers = make_user("pat@example.org")
    token = headers["Authorization"].split(" ", 1)[1]

    before = verify_and_resolve(store, token)
    add_admin(store, "PAT@example.org", "tests")
    after = verify_and_resolve(store, token)

    assert before.effective_role == ROLE_USER
    assert after.effective_role == ROLE_ADMIN
    assert after.is_admin
    assert after.claimed_role == ROLE_USER


def test_claimed_admin_without_allowlist_entry_is_a_user(store, make_user) -> None:
    user, _ = make_user("pat@example.org")
    token = create_access_token({"sub": user.id, "role": ROLE_ADMIN})

    identity = verify_and_resolve(store, token)

    assert identity.claimed_role == ROLE_ADMIN
    assert identity.effective_role == ROLE_USER


def test_unreadable_allowlist_falls_back_to_stored_role(store, backend, make_user) -> None:
    user, headers = make_user("pat@example.org")
    token = headers["Authorization"].split(" ", 1)[1]
    broken = TabularStore(_AllowlistDown(backend))

    fail_open = verify_and_resolve(broken, token, fail_closed=False)

    assert fail_open.effective_role == user.role


def test_unreadable_allowlist_fail_closed(store, backend) -> None:
    from authentication.identity import ExternalIdentity, resolve_or_create

    user = resolve_or_create(store, ExternalIdentity(email="root@example.org"), role=ROLE_ADMIN)
    broken = TabularStore(_AllowlistDown(backend))

    assert verify_and_resolve(broken, issue_token(user), fail_closed=False).effective_role == ROLE_ADMIN
    assert verify_and_resolve(broken, issue_token(user), fail_closed=True).effective_role == ROLE_USER


def test_unknown_and_inactive_users_are_rejected(store, make_user) -> None:
    user, headers = make_user("pat@example.org")
    token = headers["Authorization"].split(" ", 1)[1]

    with pytest.raises(UserNotFound):
        verify_and_resolve(store, create_access_token({"sub": "ghost"}))
    with pytest.raises(TokenInvalid):
        verify_and_resolve(store, create_access_token({"email": "pat@example.org"}))

    update_user_status(store, user.id, STATUS_INACTIVE)
    with pytest.raises(UserInactive):
        verify_and_resolve(store, token)


def test_optional_verify_never_raises(store, make_user) -> None:
    _, headers = make_user("pat@example.org")
    token = headers["Authorization"].split(" ", 1)[1]

    assert optional_verify(store, None) is None
    assert optional_verify(store, "garbage") is None
    assert optional_verify(store, token).email == "pat@example.org"
