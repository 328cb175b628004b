# models/registry.py

from models.admins import ADMIN_HEADER, ADMINS_TABLE
from models.audit_log import AUDIT_HEADER, AUDIT_LOG_TABLE
from models.credentials import CREDENTIAL_HEADER, CREDENTIALS_TABLE
from models.deals import DEAL_HEADER, DEALS_TABLE
from models.profiles import PROFILE_HEADER, PROFILES_TABLE
from models.users import USER_HEADER, USERS_TABLE

SHEET_SCHEMAS: dict[str, list[str]] = {
    USERS_TABLE: USER_HEADER,
    ADMINS_TABLE: ADMIN_HEADER,
    DEALS_TABLE: DEAL_HEADER,
    AUDIT_LOG_TABLE: AUDIT_HEADER,
    PROFILES_TABLE: PROFILE_HEADER,
    CREDENTIALS_TABLE: CREDENTIAL_HEADER,
}
