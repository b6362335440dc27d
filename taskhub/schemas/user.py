from pydantic import BaseModel, ConfigDict, EmailStr, field_validator


def _check_password_bytes(v: str) -> str:
    """Ensure password does not exceed bcrypt's 72-byte limit when UTF-8 encoded."""
    if len(v.encode("utf-8")) > 72:
        raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
    return v


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: str
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def username_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("username cannot be empty")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_valid(cls, v: str) -> str:
        if not v:
            raise ValueError("password cannot be empty")
        return _check_password_bytes(v)


class UserLogin(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: str
    password: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: EmailStr


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class CurrentUser(BaseModel):
    """Identity carried by a verified bearer token."""

    id: int
    username: str


class TokenOut(BaseModel):
    token: str
    token_type: str = "bearer"
