"""
WhatsApp Cloud API webhook payloads.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from rentbot.utils.phone import digits_only, is_group_address, to_channel_address


class WebhookPayloadModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TextContent(WebhookPayloadModel):
    body: str = ""


class MediaContent(WebhookPayloadModel):
    id: Optional[str] = None
    caption: Optional[str] = None
    mime_type: Optional[str] = None


class CloudMessage(WebhookPayloadModel):
    """A single message object from a webhook change."""

    from_: str = Field(..., alias="from")
    id: str
    timestamp: Optional[str] = None
    type: str
    text: Optional[TextContent] = None
    image: Optional[MediaContent] = None
    group_id: Optional[str] = None

    @property
    def body(self) -> str:
        if self.type == "text" and self.text:
            return self.text.body
        if self.type == "image" and self.image and self.image.caption:
            return self.image.caption
        return ""


class Metadata(WebhookPayloadModel):
    display_phone_number: Optional[str] = None
    phone_number_id: Optional[str] = None


class ChangeValue(WebhookPayloadModel):
    messaging_product: Optional[str] = None
    metadata: Optional[Metadata] = None
    messages: List[CloudMessage] = Field(default_factory=list)
    statuses: List[Dict[str, Any]] = Field(default_factory=list)


class Change(WebhookPayloadModel):
    field: str
    value: ChangeValue


class Entry(WebhookPayloadModel):
    id: str
    changes: List[Change] = Field(default_factory=list)


class WhatsAppWebhookRequest(WebhookPayloadModel):
    """Top-level webhook notification."""

    object: str
    entry: List[Entry] = Field(default_factory=list)

    def inbound_messages(self) -> List["InboundMessage"]:
        """Flatten every message in the notification into InboundMessages."""
        inbound = []
        for entry in self.entry:
            for change in entry.changes:
                if change.field != "messages":
                    continue
                own_number = ""
                if change.value.metadata and change.value.metadata.display_phone_number:
                    own_number = digits_only(change.value.metadata.display_phone_number)
                for message in change.value.messages:
                    inbound.append(InboundMessage.from_cloud(message, own_number))
        return inbound


class InboundMessage(BaseModel):
    """Channel-independent inbound text event."""

    message_id: Optional[str] = None
    sender: str
    text: str = ""
    is_group: bool = False
    from_me: bool = False
    timestamp: Optional[str] = None

    @classmethod
    def from_cloud(cls, message: CloudMessage, own_number: str = "") -> "InboundMessage":
        sender = to_channel_address(message.from_)
        return cls(
            message_id=message.id,
            sender=sender,
            text=message.body,
            is_group=bool(message.group_id) or is_group_address(message.from_),
            from_me=bool(own_number) and digits_only(message.from_) == own_number,
            timestamp=message.timestamp,
        )
