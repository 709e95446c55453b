"""WhatsApp Cloud API session over httpx."""

import asyncio
from typing import Any, Dict, Optional

import httpx

from rentbot.channel.base import ChannelSession, DisconnectReason, PresenceState
from rentbot.core.config import Settings, get_settings
from rentbot.core.exceptions import ChannelError, SessionClosedError, SessionLoggedOutError
from rentbot.core.logging import get_logger, mask_phone
from rentbot.utils.phone import normalize_phone

logger = get_logger(__name__)

# Graph API error code for an expired or revoked access token
OAUTH_INVALID_TOKEN = 190


def _error_details(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text}
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return {"message": response.text}


class WhatsAppCloudSession(ChannelSession):
    """Channel session backed by the WhatsApp Cloud (Graph) API."""

    service_name = "whatsapp"

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        settings = settings or get_settings()
        self.phone_number_id = settings.whatsapp_phone_number_id
        self.health_interval = settings.session_health_interval_seconds
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=f"{settings.whatsapp_api_base}/{settings.whatsapp_api_version}",
            headers={"Authorization": f"Bearer {settings.whatsapp_access_token}"},
            timeout=settings.whatsapp_timeout_seconds,
        )
        self._closed = asyncio.Event()
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def _raise_for_status(self, response: httpx.Response, operation: str) -> None:
        if response.is_success:
            return
        error = _error_details(response)
        if response.status_code == 401 or error.get("code") == OAUTH_INVALID_TOKEN:
            self._connected = False
            raise SessionLoggedOutError(self.service_name, status_code=response.status_code)
        raise ChannelError(
            self.service_name,
            f"{operation} failed: HTTP {response.status_code}: {error.get('message', '')}",
            status_code=response.status_code,
            error_code=error.get("code"),
        )

    async def _probe(self) -> None:
        try:
            response = await self.client.get(
                f"/{self.phone_number_id}", params={"fields": "id,display_phone_number"}
            )
        except httpx.HTTPError as e:
            raise SessionClosedError(self.service_name, f"unreachable: {e}") from e

        try:
            self._raise_for_status(response, "session check")
        except SessionLoggedOutError:
            raise
        except ChannelError as e:
            raise SessionClosedError(self.service_name, str(e), status_code=response.status_code) from e

    async def connect(self) -> None:
        self._closed.clear()
        await self._probe()
        self._connected = True
        logger.info("WhatsApp connected", phone_number_id=self.phone_number_id)

    async def wait_closed(self) -> DisconnectReason:
        while True:
            try:
                await asyncio.wait_for(self._closed.wait(), timeout=self.health_interval)
                return DisconnectReason.CLOSED
            except asyncio.TimeoutError:
                pass

            try:
                await self._probe()
            except SessionLoggedOutError:
                self._connected = False
                return DisconnectReason.LOGGED_OUT
            except SessionClosedError as e:
                logger.warning("WhatsApp session check failed", reason=e.reason)
                self._connected = False
                return DisconnectReason.CONNECTION_LOST

    async def _post_message(self, payload: Dict[str, Any], operation: str) -> Dict[str, Any]:
        body = {"messaging_product": "whatsapp", **payload}
        try:
            response = await self.client.post(f"/{self.phone_number_id}/messages", json=body)
        except httpx.HTTPError as e:
            raise ChannelError(self.service_name, f"{operation} failed: {e}") from e
        self._raise_for_status(response, operation)
        return response.json()

    async def send_text(self, to: str, text: str) -> None:
        await self._post_message(
            {
                "recipient_type": "individual",
                "to": normalize_phone(to),
                "type": "text",
                "text": {"body": text},
            },
            "send text",
        )
        logger.debug("Text sent", to=mask_phone(to))

    async def upload_media(self, data: bytes, filename: str, mimetype: str) -> str:
        """Upload a file and return its media id."""
        try:
            response = await self.client.post(
                f"/{self.phone_number_id}/media",
                data={"messaging_product": "whatsapp", "type": mimetype},
                files={"file": (filename, data, mimetype)},
            )
        except httpx.HTTPError as e:
            raise ChannelError(self.service_name, f"media upload failed: {e}") from e
        self._raise_for_status(response, "media upload")
        media_id = response.json().get("id")
        if not media_id:
            raise ChannelError(self.service_name, "media upload returned no id")
        return media_id

    async def send_document(
        self,
        to: str,
        data: bytes,
        filename: str,
        mimetype: str,
        caption: Optional[str] = None,
    ) -> None:
        media_id = await self.upload_media(data, filename, mimetype)
        document = {"id": media_id, "filename": filename}
        if caption:
            document["caption"] = caption

        await self._post_message(
            {
                "recipient_type": "individual",
                "to": normalize_phone(to),
                "type": "document",
                "document": document,
            },
            "send document",
        )
        logger.info("Document sent", to=mask_phone(to), filename=filename)

    async def send_presence(
        self, to: str, state: PresenceState, message_id: Optional[str] = None
    ) -> None:
        # The Cloud API only exposes a typing indicator tied to an inbound message
        if state != PresenceState.COMPOSING or not message_id:
            return
        try:
            await self._post_message(
                {
                    "status": "read",
                    "message_id": message_id,
                    "typing_indicator": {"type": "text"},
                },
                "typing indicator",
            )
        except ChannelError as e:
            logger.debug("Typing indicator not sent", error=str(e))

    async def close(self) -> None:
        self._closed.set()
        self._connected = False
        if self._owns_client:
            await self.client.aclose()
