# Repositories
from fitpass.repositories.base import BaseRepository
from fitpass.repositories.user import UserRepository
from fitpass.repositories.venue import VenueRepository
from fitpass.repositories.subscription import SubscriptionRepository
from fitpass.repositories.billing import BusinessSubscriptionRepository, TransactionRepository
from fitpass.repositories.pass_config import PassConfigRepository
from fitpass.repositories.booking import BookingRepository
from fitpass.repositories.notification import NotificationRepository
from fitpass.repositories.audit import AuditLogRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "VenueRepository",
    "SubscriptionRepository",
    "BusinessSubscriptionRepository",
    "TransactionRepository",
    "PassConfigRepository",
    "BookingRepository",
    "NotificationRepository",
    "AuditLogRepository",
]
