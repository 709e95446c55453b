"""Payment recording for record_payment intents."""

from datetime import datetime, timezone

from rentbot.channel.base import ChannelSession
from rentbot.core.config import get_settings
from rentbot.core.exceptions import DatabaseError, ReceiptGenerationError
from rentbot.core.logging import get_logger, log_business_event
from rentbot.models import ExtractedIntent, Landlord, NewPayment
from rentbot.services import replies
from rentbot.services.database import DatabaseService
from rentbot.services.receipt_service import ReceiptService
from rentbot.services.tenant_matcher import TenantMatcher
from rentbot.utils.formatting import current_period, to_local

logger = get_logger(__name__)


class PaymentRecorder:
    """Inserts a payment for a matched tenant and sends the receipt."""

    def __init__(
        self,
        database: DatabaseService,
        tenant_matcher: TenantMatcher,
        receipt_service: ReceiptService,
    ):
        settings = get_settings()
        self.database = database
        self.tenant_matcher = tenant_matcher
        self.receipt_service = receipt_service
        self.payment_method = settings.payment_method_tag
        self.currency = settings.currency_code
        self.tz = settings.business_timezone

    async def record(self, landlord: Landlord, intent: ExtractedIntent, channel: ChannelSession) -> str:
        """Record the payment described by ``intent``; returns the reply text."""
        if not intent.tenant_name or not intent.amount:
            return replies.MISSING_PAYMENT_FIELDS

        try:
            match = await self.tenant_matcher.match(landlord.id, intent.tenant_name)
        except DatabaseError as e:
            logger.error("Tenant lookup failed", error=str(e))
            return replies.TENANT_QUERY_ERROR

        if match.ambiguous:
            return replies.ambiguous_tenant(intent.tenant_name, match.candidates)
        if not match.found:
            return replies.tenant_not_found(intent.tenant_name)

        tenant = match.tenant
        recorded_at = datetime.now(timezone.utc)
        period = intent.period or current_period(to_local(recorded_at, self.tz).date())

        new_payment = NewPayment(
            tenant_id=tenant.id,
            amount=intent.amount,
            period=period,
            recorded_at=recorded_at,
            payment_method=self.payment_method,
        )

        try:
            payment = await self.database.insert_payment(new_payment)
        except DatabaseError as e:
            logger.error("Payment insert failed", tenant_id=tenant.id, error=str(e))
            return replies.INSERT_FAILED

        logger.info("Payment recorded", payment_id=payment.id, tenant_id=tenant.id, amount=payment.amount, period=period)
        log_business_event(
            "payment_recorded",
            payment_id=payment.id,
            tenant_id=tenant.id,
            amount=payment.amount,
            period=period,
        )

        try:
            await self.receipt_service.generate_and_send(payment.id, tenant.phone, channel)
        except ReceiptGenerationError as e:
            logger.error("Receipt error", payment_id=payment.id, error=str(e))
            return replies.payment_recorded_receipt_failed(intent.amount, tenant.name, period, self.currency)

        return replies.payment_recorded(intent.amount, tenant.name, period, tenant.phone, self.currency)
