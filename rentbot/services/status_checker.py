"""Payment status lookups for check_status intents."""

from rentbot.core.config import get_settings
from rentbot.core.exceptions import DatabaseError
from rentbot.core.logging import get_logger, log_business_event
from rentbot.models import ExtractedIntent, Landlord
from rentbot.services import replies
from rentbot.services.database import DatabaseService
from rentbot.services.tenant_matcher import TenantMatcher
from rentbot.utils.formatting import current_period, format_short_date

logger = get_logger(__name__)


class StatusChecker:
    """Answers whether a tenant has paid for a period. Read-only."""

    def __init__(self, database: DatabaseService, tenant_matcher: TenantMatcher):
        settings = get_settings()
        self.database = database
        self.tenant_matcher = tenant_matcher
        self.currency = settings.currency_code
        self.tz = settings.business_timezone
        self.locale = settings.date_locale

    async def check(self, landlord: Landlord, intent: ExtractedIntent) -> str:
        if not intent.tenant_name:
            return replies.MISSING_TENANT_NAME

        try:
            match = await self.tenant_matcher.match(landlord.id, intent.tenant_name)
        except DatabaseError as e:
            logger.error("Tenant lookup failed", error=str(e))
            return replies.TENANT_QUERY_ERROR

        if match.ambiguous:
            return replies.ambiguous_tenant(intent.tenant_name, match.candidates)
        if not match.found:
            return replies.tenant_not_found(intent.tenant_name, hint=False)

        tenant = match.tenant
        period = intent.period or current_period(tz=self.tz)

        try:
            payment = await self.database.find_payment_for_period(tenant.id, period)
        except DatabaseError as e:
            logger.error("Payment lookup failed", tenant_id=tenant.id, error=str(e))
            return replies.TENANT_QUERY_ERROR

        log_business_event("status_checked", tenant_id=tenant.id, period=period, paid=payment is not None)

        if payment is None:
            return replies.status_unpaid(tenant.name, period)

        return replies.status_paid(
            tenant.name,
            payment.amount,
            period,
            format_short_date(payment.recorded_at, self.locale, self.tz),
            self.currency,
        )
