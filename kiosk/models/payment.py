"""Payment gateway request/response models."""

from pydantic import BaseModel, Field


class CreateOrderRequest(BaseModel):
    """Request model for creating a gateway order. ``amount`` is in rupees."""

    amount: float | str = 0
    currency: str = "INR"
    receipt: str | None = None


class Customer(BaseModel):
    """Customer details attached to a payment link."""

    name: str | None = None
    email: str | None = None
    contact: str | None = None


class PaymentLinkRequest(BaseModel):
    """Request model for creating a payment link."""

    amount: float | str = 0
    currency: str = "INR"
    customer: Customer | None = None


class PublicKeyResponse(BaseModel):
    """Response model for the checkout public key."""

    key: str


class VerifyPaymentRequest(BaseModel):
    """Fields posted back by the Razorpay checkout handler."""

    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)


class VerifyPaymentResponse(BaseModel):
    """Response model for payment verification."""

    status: str
