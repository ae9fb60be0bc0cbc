"""
Storefront Mail Providers — delivery backends and their result types.

Included backends:
- SMTP (aiosmtplib)   — SMTPProvider
- Console (dev)       — ConsoleProvider
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

import aiosmtplib

from .message import EmailMessage

logger = logging.getLogger("storefront.mail.providers")

# ── Permanent SMTP error codes (do NOT retry) ──────────────────────
_PERMANENT_CODES = frozenset({
    550,  # Mailbox unavailable (not found / no access)
    551,  # User not local
    552,  # Exceeded storage allocation
    553,  # Mailbox name not allowed
    554,  # Transaction failed
    555,  # Parameters not recognised
})


class ProviderResultStatus(str, Enum):
    """Granular result from a provider send attempt."""

    SUCCESS = "success"
    TRANSIENT_FAILURE = "transient_failure"  # next provider may succeed
    PERMANENT_FAILURE = "permanent_failure"  # do not retry


@dataclass
class ProviderResult:
    """Result returned by MailProvider.send()."""

    status: ProviderResultStatus
    provider_message_id: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == ProviderResultStatus.SUCCESS

    @property
    def should_retry(self) -> bool:
        return self.status == ProviderResultStatus.TRANSIENT_FAILURE


@runtime_checkable
class MailProvider(Protocol):
    """Interface that all mail provider backends implement."""

    name: str
    priority: int

    async def send(self, message: EmailMessage, default_from: str) -> ProviderResult:
        ...


class ConsoleProvider:
    """
    Provider that logs emails instead of sending them.

    This is the default provider in development mode.
    """

    priority: int = 100  # fallback only

    def __init__(self, name: str = "console"):
        self.name = name

    async def send(self, message: EmailMessage, default_from: str) -> ProviderResult:
        logger.info(
            "CONSOLE MAIL (not actually sent)\n"
            f"  From:    {message.from_email or default_from}\n"
            f"  To:      {', '.join(message.to)}\n"
            f"  Subject: {message.subject}\n\n"
            f"{message.body}"
        )
        return ProviderResult(
            status=ProviderResultStatus.SUCCESS,
            provider_message_id=f"console-{message.id}",
        )


class SMTPProvider:
    """
    Async SMTP mail provider backed by aiosmtplib.

    One connection per message; STARTTLS by default, direct SSL with
    ``use_ssl=True``.
    """

    def __init__(
        self,
        name: str = "smtp",
        host: str = "localhost",
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        use_ssl: bool = False,
        timeout: float = 30.0,
        priority: int = 10,
    ):
        self.name = name
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.use_ssl = use_ssl
        self.timeout = timeout
        self.priority = priority

    async def send(self, message: EmailMessage, default_from: str) -> ProviderResult:
        mime_msg = message.to_mime(default_from)
        try:
            await aiosmtplib.send(
                mime_msg,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.use_ssl,  # use_tls in aiosmtplib = connect with SSL
                start_tls=self.use_tls and not self.use_ssl,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            status = self._classify_error(e)
            logger.warning(f"SMTP send error via {self.name}: {e} (status={status.value})")
            return ProviderResult(status=status, error_message=str(e))

        message_id = mime_msg["Message-ID"]
        logger.info(f"SMTP sent via {self.name}: {message.id} → {message.to} (msg_id={message_id})")
        return ProviderResult(
            status=ProviderResultStatus.SUCCESS,
            provider_message_id=message_id,
        )

    @staticmethod
    def _classify_error(exc: Exception) -> ProviderResultStatus:
        if isinstance(exc, aiosmtplib.SMTPResponseException) and exc.code in _PERMANENT_CODES:
            return ProviderResultStatus.PERMANENT_FAILURE
        if isinstance(exc, aiosmtplib.SMTPRecipientsRefused):
            return ProviderResultStatus.PERMANENT_FAILURE
        return ProviderResultStatus.TRANSIENT_FAILURE
