"""
Payment-related enumerations.
"""

from backend.app.models.enums import CaseInsensitiveEnum


class PaymentMode(CaseInsensitiveEnum):
    CASH = "Cash"
    CARD = "Card"
    UPI = "UPI"
    WALLET = "Wallet"


class PaymentStatus(CaseInsensitiveEnum):
    PENDING = "Pending"
    SUCCESSFUL = "Successful"
    FAILED = "Failed"
    REFUNDED = "Refunded"
