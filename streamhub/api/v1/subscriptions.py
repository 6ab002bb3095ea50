"""
Subscription Management Endpoints
Router: /api/v1/subscriptions
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from ...database import get_db
from ...schemas.subscription import SubscriptionCreate, PaymentRequest
from ...services import subscriptions as subscription_service
from ...services.payment_gateway import PaymentGateway
from ..deps import get_payment_gateway

router = APIRouter()
logger = logging.getLogger(__name__)


# ==================== Endpoints ====================

@router.post("")
def create_subscription(
    payload: SubscriptionCreate,
    db: Session = Depends(get_db),
):
    """Create a pending subscription for the monthly or yearly plan"""
    subscription = subscription_service.create_subscription(db, payload.plan_type)
    return {"success": True, "subscription": subscription.to_dict()}


@router.post("/payment")
async def process_subscription_payment(
    payload: PaymentRequest,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Pay for a subscription by card
    Activates the subscription when the gateway approves the charge
    """
    card = subscription_service.CardPayload(
        card_number=payload.card_number,
        cardholder_name=payload.cardholder_name,
        expiry_month=payload.expiry_month,
        expiry_year=payload.expiry_year,
        cvv=payload.cvv,
    )
    subscription = await subscription_service.process_payment(
        db, gateway, payload.subscription_id, card
    )
    return {
        "success": True,
        "message": "Payment processed successfully",
        "subscription": subscription.to_dict(),
    }


@router.get("/{subscription_id}")
def get_subscription_status(
    subscription_id: str,
    db: Session = Depends(get_db),
):
    """Get subscription status"""
    subscription = subscription_service.get_subscription_status(db, subscription_id)
    return {"success": True, "subscription": subscription.to_dict()}
