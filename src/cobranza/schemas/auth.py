"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Username/password login submission."""

    username: str = Field(..., min_length=3, description="Account username")
    password: str = Field(..., min_length=3, description="Account password")


class UserSummary(BaseModel):
    """Public view of the logged-in user."""

    uuid: str
    role: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Response returned after a successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    user: UserSummary
