"""
Backend record models.

Rows returned by Supabase are validated into these models at the database
boundary so the rest of the pipeline never handles raw dictionaries.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PERIOD_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class PaymentMethod(str, Enum):
    """Payment method tags written by the bot or other entry points."""

    WHATSAPP_BOT = "whatsapp_bot"
    MANUAL = "manual"

    @classmethod
    def label_for(cls, tag: Optional[str]) -> str:
        """Human label printed on receipts."""
        if tag == cls.WHATSAPP_BOT.value:
            return "Cash/Mobile Money"
        return "Manual Entry"


class Record(BaseModel):
    """Base for backend rows; numeric primary keys are carried as strings."""

    model_config = ConfigDict(coerce_numbers_to_str=True, populate_by_name=True, extra="ignore")


class Landlord(Record):
    """Registered landlord, identified by a normalized phone number."""

    id: str = Field(..., description="Landlord ID")
    name: str = Field(..., description="Landlord display name")
    phone: Optional[str] = Field(default=None, description="Normalized digit-only phone number")
    email: Optional[str] = Field(default=None, description="Optional contact email")


class Property(Record):
    """Rental property owned by one landlord."""

    id: Optional[str] = Field(default=None, description="Property ID")
    address: Optional[str] = Field(default=None, description="Street address")
    landlord_id: Optional[str] = Field(default=None, description="Owning landlord ID")


class Tenant(Record):
    """Tenant matched by name within a landlord's properties."""

    id: str = Field(..., description="Tenant ID")
    name: str = Field(..., description="Tenant full name")
    phone: Optional[str] = Field(default=None, description="Tenant phone number")
    property: Optional[Property] = Field(default=None, alias="properties")


class Payment(Record):
    """Recorded rent payment."""

    id: str = Field(..., description="Payment ID")
    tenant_id: Optional[str] = Field(default=None, description="Paying tenant ID")
    amount: int = Field(..., ge=0, description="Amount in whole currency units")
    period: Optional[str] = Field(default=None, pattern=PERIOD_PATTERN, description="Rent period YYYY-MM")
    recorded_at: datetime = Field(..., description="When the payment was recorded")
    payment_method: Optional[str] = Field(default=None, description="Payment method tag")


class NewPayment(BaseModel):
    """Payload inserted into the payments table."""

    tenant_id: str
    amount: int = Field(..., ge=0)
    period: str = Field(..., pattern=PERIOD_PATTERN)
    recorded_at: datetime
    payment_method: str

    def to_row(self) -> dict:
        row = self.model_dump()
        row["recorded_at"] = self.recorded_at.isoformat()
        return row


class ReceiptLandlord(Record):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None


class ReceiptProperty(Record):
    address: Optional[str] = None
    landlord: ReceiptLandlord = Field(..., alias="landlords")


class ReceiptTenant(Record):
    name: str
    phone: Optional[str] = None
    property: ReceiptProperty = Field(..., alias="properties")


class PaymentDetails(Payment):
    """Payment joined with its tenant, property and landlord for receipts."""

    tenant: ReceiptTenant = Field(..., alias="tenants")

    @field_validator("tenant", mode="before")
    @classmethod
    def unwrap_single_item_list(cls, v):
        # PostgREST embeds to-one relations as objects but some views return lists
        if isinstance(v, list):
            if len(v) != 1:
                raise ValueError("expected exactly one related tenant")
            return v[0]
        return v

    @property
    def receipt_number(self) -> str:
        return self.id[:8].upper()
