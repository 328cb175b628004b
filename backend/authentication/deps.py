from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from db.deps import get_store
from db.tabular_store import TabularStore
from authentication.authorization import EffectiveIdentity, optional_verify, verify_and_resolve
from authentication.errors import TokenExpired, TokenInvalid, UserInactive, UserNotFound

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    store: TabularStore = Depends(get_store),
) -> EffectiveIdentity:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    try:
        return verify_and_resolve(store, credentials.credentials)
    except TokenExpired:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except TokenInvalid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    except (UserNotFound, UserInactive):
        # same answer for both so the response does not reveal which accounts exist
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User inactive")


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    store: TabularStore = Depends(get_store),
) -> EffectiveIdentity | None:
    token = credentials.credentials if credentials is not None else None
    return optional_verify(store, token)


def require_admin(user: EffectiveIdentity = Depends(get_current_user)) -> EffectiveIdentity:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
