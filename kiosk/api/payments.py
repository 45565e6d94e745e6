"""Razorpay facade endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from kiosk.api.dependencies import PaymentServiceDep
from kiosk.clients.razorpay import GatewayResponse
from kiosk.errors import SignatureMismatchError
from kiosk.models.payment import (
    CreateOrderRequest,
    PaymentLinkRequest,
    PublicKeyResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from kiosk.services.payments import VerificationStatus
from kiosk.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/razorpay", tags=["Payments"])


def _passthrough(response: GatewayResponse) -> JSONResponse:
    return JSONResponse(status_code=response.status_code, content=response.body)


@router.post("/create-order")
async def create_order(request: CreateOrderRequest, payments: PaymentServiceDep) -> JSONResponse:
    """Create a gateway order (mocked when no credentials are configured)."""
    response = await payments.create_order(request.amount, request.currency, request.receipt)
    return _passthrough(response)


@router.get("/public-key", response_model=PublicKeyResponse)
async def public_key(payments: PaymentServiceDep) -> PublicKeyResponse:
    return PublicKeyResponse(**payments.public_key())


@router.post("/create-payment-link")
async def create_payment_link(request: PaymentLinkRequest, payments: PaymentServiceDep) -> JSONResponse:
    """Create a hosted payment link (mocked when no credentials are configured)."""
    customer = request.customer.model_dump() if request.customer else None
    response = await payments.create_payment_link(request.amount, request.currency, customer)
    return _passthrough(response)


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(request: VerifyPaymentRequest, payments: PaymentServiceDep) -> VerifyPaymentResponse:
    """Verify the checkout signature for a completed payment."""
    status = payments.verify_payment(
        request.razorpay_order_id,
        request.razorpay_payment_id,
        request.razorpay_signature,
    )
    if status == VerificationStatus.INVALID_SIGNATURE:
        raise SignatureMismatchError(f"Signature mismatch for order {request.razorpay_order_id}")
    return VerifyPaymentResponse(status=status.value)
