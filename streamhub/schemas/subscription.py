from pydantic import BaseModel, Field, field_validator
from typing import Optional, Union


class SubscriptionCreate(BaseModel):
    plan_type: Optional[str] = Field(default=None, alias="planType")

    model_config = {"populate_by_name": True}


class PaymentRequest(BaseModel):
    """All fields optional here so the service reports missing ones in order"""
    card_number: Optional[str] = Field(default=None, alias="cardNumber")
    cardholder_name: Optional[str] = Field(default=None, alias="cardholderName")
    expiry_month: Optional[Union[int, str]] = Field(default=None, alias="expiryMonth")
    expiry_year: Optional[Union[int, str]] = Field(default=None, alias="expiryYear")
    cvv: Optional[str] = None
    subscription_id: Optional[Union[int, str]] = Field(default=None, alias="subscriptionId")

    model_config = {"populate_by_name": True}

    @field_validator("card_number", "cvv", mode="before")
    @classmethod
    def numbers_as_text(cls, value):
        # Clients may send digits as JSON numbers; the format check decides
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def __repr__(self):
        # never leak the card number or CVV through logs/tracebacks
        last_four = self.card_number[-4:] if self.card_number else None
        return f"PaymentRequest(card=****{last_four}, subscription_id={self.subscription_id})"

    __str__ = __repr__
