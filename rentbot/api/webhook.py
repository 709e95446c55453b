"""
WhatsApp Cloud API webhook endpoints.
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from rentbot.core.dependencies import ServiceContainer, get_container, get_deduplicator, get_message_handler
from rentbot.core.exceptions import WebhookVerificationError
from rentbot.core.logging import get_logger
from rentbot.schemas.whatsapp_webhook import WhatsAppWebhookRequest
from rentbot.services.message_handler import MessageHandler
from rentbot.utils.dedupe import InboundDeduplicator

router = APIRouter(prefix="/webhook")
logger = get_logger(__name__)


@router.get("/whatsapp", response_class=PlainTextResponse)
async def verify_webhook(
    hub_mode: Optional[str] = Query(default=None, alias="hub.mode"),
    hub_verify_token: Optional[str] = Query(default=None, alias="hub.verify_token"),
    hub_challenge: Optional[str] = Query(default=None, alias="hub.challenge"),
    container: ServiceContainer = Depends(get_container),
):
    """Answer the subscription handshake with the challenge when the token matches."""
    if hub_mode == "subscribe" and hub_verify_token == container.settings.whatsapp_verify_token:
        logger.info("Webhook verified")
        return hub_challenge or ""

    logger.warning("Webhook verification failed", mode=hub_mode)
    raise WebhookVerificationError(context={"mode": hub_mode})


@router.post("/whatsapp")
async def receive_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    handler: MessageHandler = Depends(get_message_handler),
    deduplicator: Optional[InboundDeduplicator] = Depends(get_deduplicator),
):
    """
    Accept a webhook notification and schedule each message for processing.

    Always acknowledges with 200 so the provider does not redeliver.
    """
    try:
        payload = WhatsAppWebhookRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        logger.warning("Ignoring unparseable webhook payload", error=str(e))
        return {"status": "ignored"}

    scheduled = 0
    for message in payload.inbound_messages():
        if deduplicator is not None and deduplicator.check_and_mark(message.message_id):
            continue
        background_tasks.add_task(handler.handle, message)
        scheduled += 1

    return {"status": "received", "scheduled": scheduled}
