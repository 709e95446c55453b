"""Inbound message pipeline."""

from typing import Optional

from rentbot.channel.base import ChannelSession, PresenceState
from rentbot.core.exceptions import DatabaseError, ExtractionError
from rentbot.core.logging import correlation_context, get_logger, mask_phone, set_landlord_id
from rentbot.models import IntentAction
from rentbot.schemas.whatsapp_webhook import InboundMessage
from rentbot.services import replies
from rentbot.services.identity import IdentityResolver
from rentbot.services.intent_extractor import IntentExtractor
from rentbot.services.payment_recorder import PaymentRecorder
from rentbot.services.status_checker import StatusChecker
from rentbot.utils.phone import normalize_phone

logger = get_logger(__name__)


class MessageHandler:
    """Turns one landlord message into one reply."""

    def __init__(
        self,
        channel: ChannelSession,
        identity: IdentityResolver,
        extractor: IntentExtractor,
        recorder: PaymentRecorder,
        status_checker: StatusChecker,
    ):
        self.channel = channel
        self.identity = identity
        self.extractor = extractor
        self.recorder = recorder
        self.status_checker = status_checker

    async def process_message(self, text: str, sender: str, channel: Optional[ChannelSession] = None) -> str:
        """
        Run the pipeline for one message and return the reply text.

        Every call is processed independently; replaying a message records
        the payment again.
        """
        channel = channel or self.channel

        try:
            landlord = await self.identity.resolve(sender)
        except DatabaseError as e:
            logger.error("Landlord lookup failed", error=str(e))
            return replies.DATABASE_ERROR

        if landlord is None:
            return replies.not_registered(normalize_phone(sender))

        set_landlord_id(landlord.id)

        try:
            intent = await self.extractor.extract(text)
        except ExtractionError as e:
            logger.warning("Intent extraction failed", error=str(e))
            return replies.EXTRACTION_HELP

        logger.info(
            "Intent extracted",
            action=intent.action.value,
            tenant_name=intent.tenant_name,
            amount=intent.amount,
            period=intent.period,
        )

        if intent.action == IntentAction.RECORD_PAYMENT:
            return await self.recorder.record(landlord, intent, channel)
        if intent.action == IntentAction.CHECK_STATUS:
            return await self.status_checker.check(landlord, intent)
        return replies.UNKNOWN_ACTION_HELP

    async def handle(self, message: InboundMessage) -> None:
        """Process an inbound event and send the reply; never raises."""
        text = (message.text or "").strip()
        if message.from_me or message.is_group or not text:
            return

        with correlation_context(message_id=message.message_id):
            sender = message.sender
            logger.info("Message received", sender=mask_phone(sender), text=text)

            try:
                await self.channel.send_presence(sender, PresenceState.COMPOSING, message.message_id)
                reply = await self.process_message(text, sender, self.channel)
                await self.channel.send_presence(sender, PresenceState.PAUSED, message.message_id)
                await self.channel.send_text(sender, reply)
                logger.info("Reply sent", sender=mask_phone(sender))
            except Exception as e:
                logger.error("Error processing message", error=str(e), exc_info=True)
                try:
                    await self.channel.send_text(sender, replies.GENERIC_APOLOGY)
                except Exception as send_error:
                    logger.error("Failed to send error message", error=str(send_error))
