"""
Storefront Mail Faults — typed failures for notification delivery.
"""

from __future__ import annotations

from typing import Any, Optional

from ..faults.core import Fault, FaultDomain, Severity


class MailFault(Fault):
    """Base class for all mail faults."""

    domain = FaultDomain.MAIL

    def __init__(
        self,
        message: str,
        *,
        code: str = "MAIL_ERROR",
        severity: Severity = Severity.ERROR,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ):
        super().__init__(
            message=message,
            code=code,
            domain=FaultDomain.MAIL,
            severity=severity,
            retryable=recoverable,
            metadata=details or {},
        )


class MailSendFault(MailFault):
    """Provider-level send failure (transient or permanent)."""

    def __init__(
        self,
        message: str,
        *,
        provider: str = "unknown",
        transient: bool = True,
    ):
        self.provider = provider
        self.transient = transient
        super().__init__(
            message=message,
            code="MAIL_SEND_TRANSIENT" if transient else "MAIL_SEND_PERMANENT",
            severity=Severity.WARN if transient else Severity.ERROR,
            details={"provider": provider, "transient": transient},
            recoverable=transient,
        )


class MailValidationFault(MailFault):
    """Invalid email address or missing fields."""

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(
            message=message,
            code="MAIL_VALIDATION_ERROR",
            details={"field": field},
        )
