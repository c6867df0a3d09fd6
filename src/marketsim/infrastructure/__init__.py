# Infrastructure components
from .countries import Countries, DEFAULT_TAXES
from .message_schemas import Bill, Feedback, FeedbackType, Order, SellerRegistration
from .transport import HttpTransport, SellerReply, build_url

__all__ = [
    "Countries",
    "DEFAULT_TAXES",
    "Bill",
    "Feedback",
    "FeedbackType",
    "Order",
    "SellerRegistration",
    "HttpTransport",
    "SellerReply",
    "build_url",
]
