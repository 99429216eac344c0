"""
Response Resolver - decides, per outgoing message, between the completion
provider and the local fallback table.
"""

import asyncio
import logging
from typing import Optional, Sequence

from .exceptions import ProviderError, ProviderUnavailable
from .fallback import fallback_reply
from ..models import Message
from ..providers.client import CompletionClient

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 6


class ResponseResolver:
    """
    Produces displayable reply text for a user message.

    One health probe, at most one completion attempt, then fallback.
    ``resolve`` never raises for provider failures.
    """

    def __init__(
        self,
        client: Optional[CompletionClient],
        health_timeout: float = 5.0,
        chat_timeout: float = 60.0,
    ):
        """
        Args:
            client: Completion provider client, or None to always use the fallback
            health_timeout: Upper bound in seconds for the health probe
            chat_timeout: Upper bound in seconds for the completion call
        """
        self.client = client
        self.health_timeout = health_timeout
        self.chat_timeout = chat_timeout

    async def is_provider_healthy(self) -> bool:
        if self.client is None:
            return False
        try:
            await asyncio.wait_for(self.client.health(), timeout=self.health_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Provider health probe timed out after {self.health_timeout}s")
        except ProviderUnavailable as e:
            logger.warning(f"Provider unavailable: {e}")
        except Exception as e:
            logger.warning(f"Provider health probe failed unexpectedly: {e}", exc_info=True)
        return False

    async def resolve(self, message: str, recent_history: Sequence[Message] = ()) -> str:
        """
        Reply text for ``message``.

        Args:
            message: The user's message
            recent_history: Messages sent along as context; trimmed to the
                last HISTORY_WINDOW entries

        Returns:
            str: Provider reply, or the fallback reply on any provider failure
        """
        history = list(recent_history)[-HISTORY_WINDOW:]

        if not await self.is_provider_healthy():
            logger.info("Using fallback reply (provider unavailable)")
            return fallback_reply(message)

        try:
            reply = await asyncio.wait_for(
                self.client.complete(message, history), timeout=self.chat_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Completion call timed out after {self.chat_timeout}s, using fallback reply")
            return fallback_reply(message)
        except ProviderError as e:
            logger.warning(
                f"Provider error, using fallback reply: {e}",
                extra={"extra_fields": {"status_code": e.status_code}}
            )
            return fallback_reply(message)
        except Exception as e:
            logger.error(f"Completion call failed unexpectedly, using fallback reply: {e}", exc_info=True)
            return fallback_reply(message)

        return reply
