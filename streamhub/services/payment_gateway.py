"""
Payment authorization capability.
The subscription flow only talks to PaymentGateway; MockPaymentGateway simulates
a card processor and can be swapped for a real integration via PAYMENT_GATEWAY.
"""
import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..config import settings

logger = logging.getLogger(__name__)

# Failure reasons a gateway may report
CARD_DECLINED = "CARD_DECLINED"
INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
INVALID_CARD = "INVALID_CARD"
PAYMENT_ERROR = "PAYMENT_ERROR"


@dataclass(frozen=True)
class MaskedCard:
    """Card attributes safe to pass around and log. Never holds the full number or CVV."""
    cardholder_name: str
    last_four: str
    expiry_month: int
    expiry_year: int
    cvv_provided: bool = True

    @property
    def masked_number(self) -> str:
        return f"****{self.last_four}"

    def to_log_dict(self) -> dict:
        return {
            "cardholderName": self.cardholder_name,
            "cardNumber": self.masked_number,
            "expiryMonth": self.expiry_month,
            "expiryYear": self.expiry_year,
            "cvv": "***",
        }


@dataclass(frozen=True)
class AuthorizationResult:
    success: bool
    verification_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def approved(cls, verification_id: str) -> "AuthorizationResult":
        return cls(success=True, verification_id=verification_id)

    @classmethod
    def failed(cls, error: str) -> "AuthorizationResult":
        return cls(success=False, error=error)


class PaymentGateway(ABC):
    """Authorizes a charge against a card"""

    name = "abstract"

    @abstractmethod
    async def authorize(self, card: MaskedCard, amount: int, currency: str) -> AuthorizationResult:
        ...

    async def close(self):
        pass


class MockPaymentGateway(PaymentGateway):
    """
    Simulated card processor.

    The outcome is picked from the last four digits of the card, in the spirit of
    processor test cards; every other card is approved:
        0002 -> CARD_DECLINED
        9995 -> INSUFFICIENT_FUNDS
        0127 -> INVALID_CARD
        0119 -> PAYMENT_ERROR
    """

    name = "mock"

    OUTCOMES = {
        "0002": CARD_DECLINED,
        "9995": INSUFFICIENT_FUNDS,
        "0127": INVALID_CARD,
        "0119": PAYMENT_ERROR,
    }

    def __init__(self, delay_seconds: float = 0.0):
        self.delay_seconds = delay_seconds

    async def authorize(self, card: MaskedCard, amount: int, currency: str) -> AuthorizationResult:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

        error = self.OUTCOMES.get(card.last_four)
        if error:
            logger.info(f"💳 Mock gateway rejected {card.masked_number}: {error}")
            return AuthorizationResult.failed(error)

        verification_id = f"PAY-{uuid.uuid4().hex}"
        logger.info(f"💳 Mock gateway approved {card.masked_number} for {amount} {currency}")
        return AuthorizationResult.approved(verification_id)


def create_payment_gateway(name: Optional[str] = None) -> PaymentGateway:
    """Build the gateway configured by PAYMENT_GATEWAY"""
    name = (name or settings.PAYMENT_GATEWAY).lower()

    if name == MockPaymentGateway.name:
        return MockPaymentGateway(delay_seconds=settings.MOCK_PAYMENT_DELAY_SECONDS)

    raise ValueError(f"Unsupported payment gateway: {name}")


payment_gateway = create_payment_gateway()
