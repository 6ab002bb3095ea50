from streamhub.database import Base
from streamhub.models.watch_history import WatchHistory, VideoQuality
from streamhub.models.subscription import Subscription, PlanType, SubscriptionStatus, PaymentStatus
from streamhub.models.search_history import SearchHistory

# This ensures all models are registered with Base.metadata
__all__ = [
    "Base", "WatchHistory", "VideoQuality", "Subscription", "PlanType",
    "SubscriptionStatus", "PaymentStatus", "SearchHistory"
]
