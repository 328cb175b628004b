from db.errors import DealflowError


class AuthError(DealflowError):
    pass


class TokenInvalid(AuthError):
    pass


class TokenExpired(TokenInvalid):
    pass


class UserNotFound(AuthError):
    pass


class UserInactive(AuthError):
    pass


class MissingEmail(AuthError):
    pass


class OAuthError(AuthError):
    """The identity provider exchange failed or returned something unusable."""


class UserAlreadyExists(AuthError):
    pass
