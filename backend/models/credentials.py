# models/credentials.py
# Password hashes for email/password accounts live apart from Users.

CREDENTIALS_TABLE = "Credentials"


class CredentialColumns:
    EMAIL = "email"
    PASSWORD_HASH = "password_hash"
    CREATED_AT = "created_at"


CREDENTIAL_HEADER = [
    CredentialColumns.EMAIL,
    CredentialColumns.PASSWORD_HASH,
    CredentialColumns.CREATED_AT,
]
