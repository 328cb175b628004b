# models/profiles.py

PROFILES_TABLE = "UserProfiles"

DEFAULT_TERRITORY = "North America"


class ProfileColumns:
    EMAIL = "email"
    TERRITORY = "territory"
    COMPANY_DESCRIPTION = "company_description"
    COMPANY_SIZE = "company_size"
    WEBSITE_URL = "website_url"
    COMPANY_NAME = "company_name"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


PROFILE_HEADER = [
    ProfileColumns.EMAIL,
    ProfileColumns.TERRITORY,
    ProfileColumns.COMPANY_DESCRIPTION,
    ProfileColumns.COMPANY_SIZE,
    ProfileColumns.WEBSITE_URL,
    ProfileColumns.COMPANY_NAME,
    ProfileColumns.CREATED_AT,
    ProfileColumns.UPDATED_AT,
]
