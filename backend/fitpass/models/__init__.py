# Database models
from fitpass.models.user import User
from fitpass.models.venue import Venue
from fitpass.models.subscription import Subscription
from fitpass.models.business_subscription import BusinessSubscription
from fitpass.models.subscription_transaction import SubscriptionTransaction
from fitpass.models.pass_config import PassConfig, PASS_TYPES
from fitpass.models.booking import Booking
from fitpass.models.notification import (
    BusinessNotificationSettings,
    UserNotificationPreference,
    NotificationLog,
)
from fitpass.models.audit_log import AuditLog

__all__ = [
    "User",
    "Venue",
    "Subscription",
    "BusinessSubscription",
    "SubscriptionTransaction",
    "PassConfig",
    "PASS_TYPES",
    "Booking",
    "BusinessNotificationSettings",
    "UserNotificationPreference",
    "NotificationLog",
    "AuditLog",
]
