"""Abstract messaging channel session."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional


class DisconnectReason(str, Enum):
    """Why a session stopped."""

    CONNECTION_LOST = "connection_lost"
    LOGGED_OUT = "logged_out"
    CLOSED = "closed"


class PresenceState(str, Enum):
    COMPOSING = "composing"
    PAUSED = "paused"


class ChannelSession(ABC):
    """
    A live connection to a messaging channel.

    The pipeline only depends on this interface, so tests can pass a fake
    session and transports can be swapped without touching the services.
    """

    service_name = "channel"

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish or verify the session.

        Raises:
            SessionLoggedOutError: If the credential was invalidated
            SessionClosedError: If the channel is unreachable for now
        """

    @abstractmethod
    async def wait_closed(self) -> DisconnectReason:
        """Block until the session ends and report why."""

    @abstractmethod
    async def send_text(self, to: str, text: str) -> None:
        """Send a text message to a channel address."""

    @abstractmethod
    async def send_document(
        self,
        to: str,
        data: bytes,
        filename: str,
        mimetype: str,
        caption: Optional[str] = None,
    ) -> None:
        """Send a file as a document message."""

    @abstractmethod
    async def send_presence(
        self, to: str, state: PresenceState, message_id: Optional[str] = None
    ) -> None:
        """Best-effort typing indicator."""

    @abstractmethod
    async def close(self) -> None:
        """Release the session; a pending wait_closed returns CLOSED."""

    @property
    def connected(self) -> bool:
        return False
