"""Pydantic models for the payment gateway API."""

from typing import Optional

from pydantic import BaseModel, Field


class PaymentCustomization(BaseModel):
    title: str
    description: str


class PaymentRequest(BaseModel):
    """Checkout session request sent to the payment gateway."""

    amount: float
    currency: str
    first_name: str
    last_name: str
    email: str
    callback_url: str
    return_url: str
    tx_ref: str = Field(..., description="Our order id, echoed back by the gateway")
    customization: PaymentCustomization
    meta: dict = Field(default_factory=dict)


class CheckoutData(BaseModel):
    checkout_url: str

    class Config:
        extra = "allow"


class PaymentResponse(BaseModel):
    """Gateway response; only ``data.checkout_url`` is used."""

    status: Optional[str] = None
    message: Optional[str] = None
    data: Optional[CheckoutData] = None

    class Config:
        extra = "allow"
