from .enums import CategoryKind, PaymentMethod, TransactionStatus, TransactionType
from .money import MonetaryValue

__all__ = [
    "CategoryKind",
    "MonetaryValue",
    "PaymentMethod",
    "TransactionStatus",
    "TransactionType",
]
