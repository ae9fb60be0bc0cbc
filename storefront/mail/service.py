"""
Storefront Mail Service — sends EmailMessages through configured providers.

Providers are tried in priority order (lower = preferred). A transient
failure falls through to the next provider; a permanent failure stops.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .faults import MailSendFault
from .message import EmailMessage
from .providers import ConsoleProvider, MailProvider

logger = logging.getLogger("storefront.mail")


class MailService:
    """Central mail service — owns provider selection and the send pipeline."""

    def __init__(
        self,
        providers: Optional[Sequence[MailProvider]] = None,
        *,
        default_from: str = "orders@localhost",
        subject_prefix: str = "",
        enabled: bool = True,
    ):
        self.providers = sorted(providers or [ConsoleProvider()], key=lambda p: getattr(p, "priority", 50))
        self.default_from = default_from
        self.subject_prefix = subject_prefix
        self.enabled = enabled

    async def send_message(self, message: EmailMessage) -> Optional[str]:
        """
        Deliver *message*.

        Returns:
            provider message id, or None when mail is disabled

        Raises:
            MailSendFault: every provider failed, or one failed permanently
        """
        if not self.enabled:
            logger.debug(f"Mail disabled, dropping {message!r}")
            return None

        if self.subject_prefix:
            message.subject = self.subject_prefix + message.subject

        last_error: Optional[str] = None
        for provider in self.providers:
            result = await provider.send(message, self.default_from)

            if result.is_success:
                logger.info(f"✓ Sent {message.id} via {provider.name} (msg_id={result.provider_message_id})")
                return result.provider_message_id

            if not result.should_retry:
                raise MailSendFault(
                    f"Permanent send failure via {provider.name}: {result.error_message}",
                    provider=provider.name,
                    transient=False,
                )

            logger.warning(f"Transient failure from {provider.name}: {result.error_message}")
            last_error = result.error_message

        raise MailSendFault(
            f"All providers failed for message {message.id}: {last_error}",
            provider="all",
            transient=True,
        )
