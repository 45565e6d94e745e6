"""Identity lookup request/response models."""

from pydantic import BaseModel


class IdentityResponse(BaseModel):
    """Identity details returned to pre-fill the registration form."""

    name: str
    age: int
    token: str


class BiometricRequest(BaseModel):
    """Request model for fingerprint authentication."""

    template: str
    mode: str = "mock"
