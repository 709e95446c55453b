"""
Reconnect policy for channel sessions using tenacity.
"""
from dataclasses import dataclass
from typing import Callable, Optional

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_never,
    wait_fixed,
)

from rentbot.core.exceptions import SessionClosedError

logger = structlog.get_logger(__name__)


@dataclass
class ReconnectConfig:
    """Configuration for session reconnection."""

    delay_seconds: float = 3.0
    retryable_exceptions: tuple = (SessionClosedError,)


def create_reconnect_controller(
    config: Optional[ReconnectConfig] = None,
    service_name: str = "channel",
    sleep: Optional[Callable] = None,
) -> AsyncRetrying:
    """
    Build an async retry controller that re-runs a session after a fixed delay.

    Only the configured retryable exceptions trigger another attempt; anything
    else (an explicit logout in particular) propagates to the caller.
    """
    config = config or ReconnectConfig()

    def _before_sleep(retry_state: RetryCallState) -> None:
        """Log reconnect attempts."""
        logger.warning(
            "Channel session closed, reconnecting",
            service=service_name,
            attempt=retry_state.attempt_number,
            delay=retry_state.next_action.sleep,
            reason=str(retry_state.outcome.exception()),
        )

    kwargs = dict(
        stop=stop_never,
        wait=wait_fixed(config.delay_seconds),
        retry=retry_if_exception_type(config.retryable_exceptions),
        before_sleep=_before_sleep,
        reraise=True,
    )
    if sleep is not None:
        kwargs["sleep"] = sleep

    return AsyncRetrying(**kwargs)
