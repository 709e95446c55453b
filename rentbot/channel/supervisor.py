"""Keeps a channel session connected."""

import asyncio
from typing import Callable, Optional

from rentbot.channel.base import ChannelSession, DisconnectReason
from rentbot.core.exceptions import SessionClosedError, SessionLoggedOutError
from rentbot.core.logging import get_logger
from rentbot.core.retry import ReconnectConfig, create_reconnect_controller

logger = get_logger(__name__)


class SessionSupervisor:
    """
    Runs a channel session and reconnects after a fixed delay when it drops.

    An explicit logout ends supervision; the credential has to be reset by
    an operator before the bot can connect again.
    """

    def __init__(
        self,
        session: ChannelSession,
        reconnect_delay: float = 3.0,
        sleep: Optional[Callable] = None,
    ):
        self.session = session
        self.reconnect_delay = reconnect_delay
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self.state = "idle"
        self.attempts = 0

    async def _run_once(self) -> None:
        self.attempts += 1
        self.state = "connecting"
        await self.session.connect()
        self.state = "connected"

        reason = await self.session.wait_closed()
        logger.warning("Channel session ended", service=self.session.service_name, reason=reason.value)

        if reason == DisconnectReason.LOGGED_OUT:
            raise SessionLoggedOutError(self.session.service_name)
        if reason == DisconnectReason.CLOSED:
            return
        self.state = "reconnecting"
        raise SessionClosedError(self.session.service_name, reason.value)

    async def run(self) -> None:
        """Supervise until the session is closed or logged out."""
        controller = create_reconnect_controller(
            ReconnectConfig(delay_seconds=self.reconnect_delay),
            service_name=self.session.service_name,
            sleep=self._sleep,
        )

        try:
            async for attempt in controller:
                with attempt:
                    await self._run_once()
        except SessionLoggedOutError:
            self.state = "logged_out"
            logger.error(
                "Channel logged out, reset the credential and restart",
                service=self.session.service_name,
            )
            return

        self.state = "stopped"

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        await self.session.close()
        self.state = "stopped"
