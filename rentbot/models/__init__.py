"""
Models package for the rent bot.
"""
from .intent import ExtractedIntent, IntentAction
from .records import (
    Landlord,
    NewPayment,
    Payment,
    PaymentDetails,
    PaymentMethod,
    Property,
    Tenant,
)

__all__ = [
    "ExtractedIntent",
    "IntentAction",
    "Landlord",
    "NewPayment",
    "Payment",
    "PaymentDetails",
    "PaymentMethod",
    "Property",
    "Tenant",
]
