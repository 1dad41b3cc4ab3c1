from .notification import Notification
from .payment_intent import PaymentIntentRecord
from .review import Review
from .service_request import ServiceRequest
from .shop import Shop
from .status_history import StatusHistory
from .user import User

__all__ = [
    "Notification",
    "PaymentIntentRecord",
    "Review",
    "ServiceRequest",
    "Shop",
    "StatusHistory",
    "User",
]
