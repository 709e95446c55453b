"""Reply texts sent back to landlords."""

from typing import Sequence

from rentbot.models import Tenant
from rentbot.utils.formatting import format_amount

DATABASE_ERROR = "❌ Database error. Please try again or contact support."
TENANT_QUERY_ERROR = "❌ Database error. Please try again."
GENERIC_APOLOGY = "❌ Sorry, something went wrong. Please try again or contact support."

EXTRACTION_HELP = (
    "🤔 I didn't understand that. Please try:\n"
    "• 'Kamau paid 500000'\n"
    "• 'Record payment: John 600k December'\n"
    "• 'Did Sarah pay this month?'"
)

UNKNOWN_ACTION_HELP = (
    "🤔 I didn't understand that. I can help you:\n\n"
    "• Record payments: 'Kamau paid 500000'\n"
    "• Check status: 'Did Sarah pay this month?'\n\n"
    "Try one of these!"
)

MISSING_PAYMENT_FIELDS = (
    "❌ Please include tenant name and amount.\n"
    "Example: 'Kamau paid 500000'"
)

MISSING_TENANT_NAME = (
    "❌ Please specify which tenant.\n"
    "Example: 'Did Kamau pay this month?'"
)

INSERT_FAILED = "❌ Failed to record payment. Please try again."


def not_registered(phone: str) -> str:
    return (
        f"❌ Your number ({phone}) is not registered as a landlord.\n\n"
        "Please register first or contact support if this is an error."
    )


def tenant_not_found(name: str, hint: bool = True) -> str:
    text = f"❌ Couldn't find tenant \"{name}\"."
    if hint:
        text += "\n\nCheck spelling or add them to your property first."
    return text


def ambiguous_tenant(name: str, candidates: Sequence[Tenant]) -> str:
    lines = [f"🤔 More than one tenant matches \"{name}\":"]
    lines.extend(f"{i}. {tenant.name}" for i, tenant in enumerate(candidates, start=1))
    lines.append("\nPlease send the message again with the full name.")
    return "\n".join(lines)


def payment_recorded(amount: int, tenant_name: str, period: str, tenant_phone: str, currency: str = "UGX") -> str:
    return (
        f"✅ {format_amount(amount)} {currency} recorded for {tenant_name} ({period}).\n"
        f"📄 Receipt sent to {tenant_phone}."
    )


def payment_recorded_receipt_failed(amount: int, tenant_name: str, period: str, currency: str = "UGX") -> str:
    return (
        f"✅ {format_amount(amount)} {currency} recorded for {tenant_name} ({period}).\n\n"
        "⚠️ Receipt generation failed. You can generate it manually from dashboard."
    )


def status_paid(tenant_name: str, amount: int, period: str, paid_on: str, currency: str = "UGX") -> str:
    return (
        f"✅ Yes, {tenant_name} paid {format_amount(amount)} {currency} for {period}.\n"
        f"📅 Paid on: {paid_on}"
    )


def status_unpaid(tenant_name: str, period: str) -> str:
    return f"❌ No, {tenant_name} has not paid for {period} yet."
