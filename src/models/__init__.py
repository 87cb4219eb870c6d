from src.models.base import Base
from src.models.report import Report
from src.models.transaction import TransactionMeta, VerifiedSender
from src.models.user import User, Wallet

__all__ = [
    "Base",
    "User",
    "Wallet",
    "VerifiedSender",
    "TransactionMeta",
    "Report",
]
