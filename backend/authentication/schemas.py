from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(BaseModel):
    # same normalization as RegisterRequest, so lookups match the stored row
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    territory: str | None = None


class UserResponse(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    partner_id: str
    partner_name: str


class LoginResponse(CamelModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class UserStatusRequest(BaseModel):
    status: str = Field(..., pattern="^(active|inactive)$")
