"""
Storefront Mail - transactional order notifications.

Components:
- EmailMessage: validated message handed to providers
- Providers: SMTPProvider (aiosmtplib), ConsoleProvider
- MailService: priority-ordered provider dispatch
- Notifier / MailNotifier: order confirmation, status and refund mail
"""

from .faults import MailFault, MailSendFault, MailValidationFault
from .message import EmailMessage
from .providers import (
    ConsoleProvider,
    MailProvider,
    ProviderResult,
    ProviderResultStatus,
    SMTPProvider,
)
from .service import MailService
from .notifier import MailNotifier, Notifier

__all__ = [
    "MailFault",
    "MailSendFault",
    "MailValidationFault",
    "EmailMessage",
    "ConsoleProvider",
    "MailProvider",
    "ProviderResult",
    "ProviderResultStatus",
    "SMTPProvider",
    "MailService",
    "MailNotifier",
    "Notifier",
]
