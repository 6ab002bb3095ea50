"""
StreamHub Subscription Service
Plan pricing, subscription creation and the mock card payment flow:

    inactive/pending --authorized--> active/completed
    inactive/pending --rejected----> inactive/pending (error surfaced)
    active/completed --any payment--> AlreadyPaid
"""

import asyncio
import calendar
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy.orm import Session

from ..config import settings
from ..errors import AppError, ErrorKind
from ..models import Subscription, PlanType, SubscriptionStatus, PaymentStatus
from .payment_gateway import (
    PaymentGateway, MaskedCard, AuthorizationResult,
    CARD_DECLINED, INSUFFICIENT_FUNDS, INVALID_CARD, PAYMENT_ERROR,
)

logger = logging.getLogger(__name__)

CARD_NUMBER_PATTERN = re.compile(r"[0-9]{16}")
CVV_PATTERN = re.compile(r"[0-9]{3}")

# Gateway failure reason -> (error kind, message)
FAILURE_REASONS = {
    CARD_DECLINED: (ErrorKind.CARD_DECLINED, "Card was declined"),
    INSUFFICIENT_FUNDS: (ErrorKind.INSUFFICIENT_FUNDS, "Insufficient funds"),
    INVALID_CARD: (ErrorKind.INVALID_CARD, "Invalid card details"),
    PAYMENT_ERROR: (ErrorKind.PAYMENT_ERROR, "Payment processing error"),
}


# ==================== PLANS ====================

def plan_price(plan_type: PlanType) -> int:
    """Fixed plan price in minor currency units"""
    if plan_type == PlanType.MONTHLY:
        return 149999
    if plan_type == PlanType.YEARLY:
        return 1619999
    raise AppError(ErrorKind.INVALID_INPUT, "Invalid subscription plan type")


def add_months(start: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the end of the target month"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def plan_end_date(start: datetime, plan_type: PlanType) -> datetime:
    months = 1 if plan_type == PlanType.MONTHLY else 12
    return add_months(start, months)


def parse_plan_type(plan_type: Optional[str]) -> PlanType:
    try:
        return PlanType(plan_type)
    except ValueError:
        raise AppError(ErrorKind.INVALID_INPUT, "Invalid subscription plan type")


def create_subscription(db: Session, plan_type: Optional[str], now: Optional[datetime] = None) -> Subscription:
    """Create an inactive, unpaid subscription for the given plan"""
    plan = parse_plan_type(plan_type)
    start_date = now or datetime.now(timezone.utc)

    subscription = Subscription(
        plan_type=plan,
        price=plan_price(plan),
        currency=settings.PAYMENT_CURRENCY,
        start_date=start_date,
        end_date=plan_end_date(start_date, plan),
        status=SubscriptionStatus.INACTIVE,
        payment_status=PaymentStatus.PENDING,
    )

    try:
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
    except Exception:
        db.rollback()
        raise

    logger.info(f"🆕 Subscription {subscription.id} created ({plan.value}, {subscription.price} {subscription.currency})")
    return subscription


def get_subscription_status(db: Session, subscription_id: Union[int, str, None]) -> Subscription:
    subscription = db.query(Subscription).filter(
        Subscription.id == _parse_subscription_id(subscription_id)
    ).first()

    if not subscription:
        raise AppError(ErrorKind.NOT_FOUND, "Subscription not found")
    return subscription


# ==================== PAYMENT ====================

@dataclass
class CardPayload:
    card_number: Optional[str] = None
    cardholder_name: Optional[str] = None
    expiry_month: Union[int, str, None] = None
    expiry_year: Union[int, str, None] = None
    cvv: Optional[str] = None

    def mask(self) -> MaskedCard:
        return MaskedCard(
            cardholder_name=self.cardholder_name,
            last_four=str(self.card_number)[-4:],
            expiry_month=int(self.expiry_month),
            expiry_year=int(self.expiry_year),
        )


def _parse_subscription_id(subscription_id) -> int:
    try:
        parsed = int(subscription_id)
    except (TypeError, ValueError):
        raise AppError(ErrorKind.INVALID_INPUT, "Invalid subscription ID")
    if parsed <= 0:
        raise AppError(ErrorKind.INVALID_INPUT, "Invalid subscription ID")
    return parsed


def _parse_expiry(card: CardPayload) -> tuple:
    try:
        month = int(card.expiry_month)
        year = int(card.expiry_year)
    except (TypeError, ValueError):
        raise AppError(ErrorKind.INVALID_INPUT, "Invalid card expiry date")

    if not 1 <= month <= 12 or not 1000 <= year <= 9999:
        raise AppError(ErrorKind.INVALID_INPUT, "Invalid card expiry date")
    return year, month


def validate_card(card: CardPayload, now: Optional[datetime] = None):
    """
    Card checks that need no lookups, in order: format of number, CVV, expiry.
    A card stays valid through the last day of its expiry month.
    """
    if not CARD_NUMBER_PATTERN.fullmatch(str(card.card_number)):
        raise AppError(ErrorKind.INVALID_CARD_FORMAT, "Invalid card number format")

    if not CVV_PATTERN.fullmatch(str(card.cvv)):
        raise AppError(ErrorKind.INVALID_CVV_FORMAT, "Invalid CVV format")

    year, month = _parse_expiry(card)
    today = now or datetime.now(timezone.utc)
    if (year, month) < (today.year, today.month):
        raise AppError(ErrorKind.CARD_EXPIRED, "Card has expired")


def _raise_for_failure(result: AuthorizationResult):
    kind, message = FAILURE_REASONS.get(
        result.error,
        (ErrorKind.UNKNOWN, result.error or "Payment processing error"),
    )
    raise AppError(kind, message)


async def process_payment(
    db: Session,
    gateway: PaymentGateway,
    subscription_id: Union[int, str, None],
    card: CardPayload,
    now: Optional[datetime] = None,
) -> Subscription:
    """
    Validate the card, authorize the plan price and activate the subscription.
    Every failure leaves the subscription untouched.
    """
    required = (
        card.card_number, card.cardholder_name, card.expiry_month,
        card.expiry_year, card.cvv, subscription_id,
    )
    if any(value is None or value == "" for value in required):
        raise AppError(ErrorKind.INVALID_INPUT, "All payment fields are required")

    validate_card(card, now=now)

    # Session calls block, so they run off the event loop
    subscription = await asyncio.to_thread(get_subscription_status, db, subscription_id)
    if subscription.is_paid():
        raise AppError(ErrorKind.ALREADY_PAID, "Subscription already paid")

    masked = card.mask()
    logger.info(f"💳 Processing payment for subscription {subscription.id} with: {masked.to_log_dict()}")

    try:
        result = await asyncio.wait_for(
            gateway.authorize(masked, subscription.price, subscription.currency),
            timeout=settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(f"❌ Payment gateway timed out for subscription {subscription.id}")
        raise AppError(ErrorKind.PAYMENT_ERROR, "Payment processing timed out")

    if not result.success:
        logger.error(f"❌ Payment failed for subscription {subscription.id}: {result.error}")
        _raise_for_failure(result)

    subscription = await asyncio.to_thread(_mark_paid, db, subscription, result, masked)
    logger.info(
        f"✅ Payment successful for subscription: {subscription.id}, "
        f"verification: {subscription.payment_verification_id}"
    )
    return subscription


def _mark_paid(db: Session, subscription: Subscription, result: AuthorizationResult, masked: MaskedCard) -> Subscription:
    """Activate the subscription only if it is still pending"""
    paid_at = datetime.now(timezone.utc)
    try:
        updated = db.query(Subscription).filter(
            Subscription.id == subscription.id,
            Subscription.payment_status == PaymentStatus.PENDING,
        ).update(
            {
                Subscription.payment_status: PaymentStatus.COMPLETED,
                Subscription.status: SubscriptionStatus.ACTIVE,
                Subscription.payment_verification_id: result.verification_id,
                Subscription.card_last_four: masked.last_four,
                Subscription.paid_at: paid_at,
            },
            synchronize_session=False,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    if not updated:
        logger.warning(f"⚠️ Subscription {subscription.id} was paid concurrently, verification {result.verification_id} unused")
        raise AppError(ErrorKind.ALREADY_PAID, "Subscription already paid")

    db.refresh(subscription)
    return subscription
