"""
Dependency injection for FastAPI application.

Services are assembled once per application into a ServiceContainer stored
on ``app.state``; route dependencies read from it so tests can install a
container built from fakes.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from rentbot.channel.base import ChannelSession
from rentbot.channel.supervisor import SessionSupervisor
from rentbot.channel.whatsapp_cloud import WhatsAppCloudSession
from rentbot.core.config import Settings, get_settings
from rentbot.services.database import DatabaseService
from rentbot.services.identity import IdentityResolver
from rentbot.services.intent_extractor import IntentExtractor
from rentbot.services.message_handler import MessageHandler
from rentbot.services.payment_recorder import PaymentRecorder
from rentbot.services.receipt_service import PdfRenderer, ReceiptService
from rentbot.services.status_checker import StatusChecker
from rentbot.services.tenant_matcher import TenantMatcher
from rentbot.utils.dedupe import InboundDeduplicator


@dataclass
class ServiceContainer:
    """Wired application services."""

    settings: Settings
    database: DatabaseService
    channel: ChannelSession
    message_handler: MessageHandler
    supervisor: SessionSupervisor
    deduplicator: Optional[InboundDeduplicator] = None


def build_container(
    settings: Optional[Settings] = None,
    database: Optional[DatabaseService] = None,
    channel: Optional[ChannelSession] = None,
    extractor: Optional[IntentExtractor] = None,
    pdf_renderer: Optional[PdfRenderer] = None,
) -> ServiceContainer:
    """
    Create the service graph.

    Args:
        settings: Application settings, loaded from the environment when omitted
        database: Backend service; a Supabase client is created when omitted
        channel: Channel session; the WhatsApp Cloud session when omitted
        extractor: Intent extractor; the Groq-backed client when omitted
        pdf_renderer: PDF renderer; headless Chromium when omitted

    Returns:
        Configured ServiceContainer
    """
    settings = settings or get_settings()
    database = database or DatabaseService()
    channel = channel or WhatsAppCloudSession(settings)

    tenant_matcher = TenantMatcher(database, policy=settings.tenant_match_policy)
    receipt_service = ReceiptService(database, pdf_renderer=pdf_renderer)

    handler = MessageHandler(
        channel=channel,
        identity=IdentityResolver(database),
        extractor=extractor or IntentExtractor(),
        recorder=PaymentRecorder(database, tenant_matcher, receipt_service),
        status_checker=StatusChecker(database, tenant_matcher),
    )

    deduplicator = None
    if settings.inbound_dedupe_enabled:
        deduplicator = InboundDeduplicator(
            ttl_seconds=settings.inbound_dedupe_ttl_seconds,
            max_entries=settings.inbound_dedupe_max_entries,
        )

    return ServiceContainer(
        settings=settings,
        database=database,
        channel=channel,
        message_handler=handler,
        supervisor=SessionSupervisor(channel, reconnect_delay=settings.reconnect_delay_seconds),
        deduplicator=deduplicator,
    )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_message_handler(container: ServiceContainer = Depends(get_container)) -> MessageHandler:
    return container.message_handler


def get_deduplicator(container: ServiceContainer = Depends(get_container)) -> Optional[InboundDeduplicator]:
    return container.deduplicator
