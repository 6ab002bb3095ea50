"""
StreamHub Subscription Model
One row per purchase intent, paid once through the payment gateway
"""
from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from enum import Enum
from ..database import Base


# ==================== ENUMS ====================

class PlanType(str, Enum):
    """Subscription billing cycle"""
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SubscriptionStatus(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class PaymentStatus(str, Enum):
    """Payment state of a subscription"""
    PENDING = "pending"
    COMPLETED = "completed"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# ==================== SUBSCRIPTION MODEL ====================

class Subscription(Base):
    """
    Subscriptions table
    status becomes active exactly when payment_status becomes completed
    """
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)

    # Plan
    plan_type = Column(SQLEnum(PlanType, name="plan_type", values_callable=_enum_values), nullable=False)
    price = Column(Integer, nullable=False)  # minor currency units
    currency = Column(String(3), nullable=False)

    # Period
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)

    # Lifecycle
    status = Column(
        SQLEnum(SubscriptionStatus, name="subscription_status_type", values_callable=_enum_values),
        default=SubscriptionStatus.INACTIVE,
        nullable=False,
        index=True,
    )
    payment_status = Column(
        SQLEnum(PaymentStatus, name="subscription_payment_status_type", values_callable=_enum_values),
        default=PaymentStatus.PENDING,
        nullable=False,
    )

    # Set only on successful payment
    payment_verification_id = Column(String(255), unique=True, nullable=True)
    card_last_four = Column(String(4), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # ==================== METHODS ====================

    def __repr__(self):
        return f"<Subscription(id={self.id}, plan={self.plan_type}, status={self.status}, payment={self.payment_status})>"

    def is_paid(self) -> bool:
        """Check if payment was completed"""
        return self.payment_status == PaymentStatus.COMPLETED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "planType": self.plan_type.value,
            "price": self.price,
            "currency": self.currency,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "status": self.status.value,
            "paymentStatus": self.payment_status.value,
            "paymentVerificationId": self.payment_verification_id,
        }
