"""Identity endpoints: Aadhaar lookup and biometric authentication (mock)."""

from fastapi import APIRouter

from kiosk.api.dependencies import IdentityServiceDep
from kiosk.models.identity import BiometricRequest, IdentityResponse
from kiosk.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Identity"])


@router.get("/fetch-aadhar/{aadhaar_number}", response_model=IdentityResponse)
async def fetch_aadhaar(aadhaar_number: str, identity: IdentityServiceDep) -> IdentityResponse:
    """Simulated UIDAI lookup returning demo identity details."""
    record = identity.lookup_aadhaar(aadhaar_number)
    logger.info(f"Aadhaar lookup for ****{aadhaar_number[-4:]} resolved to {record.name!r}")
    return IdentityResponse(name=record.name, age=record.age, token=record.token)


@router.post("/biometric/authenticate", response_model=IdentityResponse)
async def authenticate_biometric(request: BiometricRequest, identity: IdentityServiceDep) -> IdentityResponse:
    """Match a fingerprint template to an identity.

    Only ``mock`` mode is available; ``real`` answers 501.
    """
    record = identity.authenticate_biometric(request.template, request.mode)
    logger.info(f"Biometric match ({request.mode}) resolved to {record.name!r}")
    return IdentityResponse(name=record.name, age=record.age, token=record.token)
