"""Auth payloads.

A user's email is their payment identity: it is what other users type as the
recipient or payer of a transfer. It is normalized here, once, with the same
rule the transfer core applies to counterparty identities.
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, BeforeValidator, EmailStr, Field, model_validator

from src.mb_common.principal import normalize_identity

MIN_PASSWORD_LENGTH = 10
# bcrypt only looks at the first 72 bytes.
MAX_PASSWORD_BYTES = 72


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


IdentityEmail = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(normalize_identity)]


class RegisterRequest(BaseModel):
    email: IdentityEmail
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    display_name: Annotated[str | None, BeforeValidator(_strip)] = Field(None, max_length=80)

    @model_validator(mode="after")
    def _check_password(self) -> "RegisterRequest":
        pw = self.password
        if len(pw.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        if not any(c.isalpha() for c in pw) or not any(c.isdigit() for c in pw):
            raise ValueError("password must contain both letters and digits")
        local = self.email.split("@", 1)[0]
        if len(local) >= 3 and local in pw.lower():
            raise ValueError("password must not contain the email name")
        if not self.display_name:
            self.display_name = None
        return self


class LoginRequest(BaseModel):
    email: Annotated[str, AfterValidator(normalize_identity)]
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class UserProfile(BaseModel):
    user_id: str
    email: str
    display_name: str | None
    created_at: datetime


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserProfile


class RefreshResponse(BaseModel):
    access_token: str
    expires_in: int
