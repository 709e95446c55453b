"""Sender identity resolution."""

from typing import Optional

from rentbot.core.logging import get_logger, log_business_event, mask_phone
from rentbot.models import Landlord
from rentbot.services.database import DatabaseService
from rentbot.utils.phone import normalize_phone

logger = get_logger(__name__)


class IdentityResolver:
    """Maps a channel address to a registered landlord."""

    def __init__(self, database: DatabaseService):
        self.database = database

    async def resolve(self, address: str) -> Optional[Landlord]:
        """
        Look up the landlord that owns ``address``.

        Returns None when the number is not registered. Backend failures
        propagate as DatabaseError so callers can tell the two apart.
        """
        phone = normalize_phone(address)
        if not phone:
            return None

        landlord = await self.database.find_landlord_by_phone(phone)
        if landlord is None:
            logger.info("Sender is not a registered landlord", sender=mask_phone(phone))
            log_business_event("landlord_unregistered", sender=mask_phone(phone))
            return None

        logger.info("Landlord resolved", landlord_id=landlord.id, landlord_name=landlord.name)
        return landlord
