"""
Structured intent extracted from a landlord message.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rentbot.models.records import PERIOD_PATTERN


class IntentAction(str, Enum):
    """Actions the extraction service may return."""

    RECORD_PAYMENT = "record_payment"
    CHECK_STATUS = "check_status"
    UNKNOWN = "unknown"


class ExtractedIntent(BaseModel):
    """Intent parsed from the extraction service's JSON response."""

    model_config = ConfigDict(extra="forbid")

    action: IntentAction = Field(..., description="Requested action")
    tenant_name: Optional[str] = Field(default=None, description="Tenant name as written by the landlord")
    amount: Optional[int] = Field(default=None, ge=0, description="Amount in whole currency units")
    period: Optional[str] = Field(default=None, pattern=PERIOD_PATTERN, description="Rent period YYYY-MM")

    @field_validator("tenant_name", mode="before")
    @classmethod
    def blank_name_is_missing(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def reject_fractional_amount(cls, v):
        if isinstance(v, float) and not v.is_integer():
            raise ValueError("amount must be a whole number")
        return v
