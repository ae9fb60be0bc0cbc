"""
Bootstrap — build a ready OrderService from settings.

Clients are constructed once here and injected; nothing is stored on a
module global.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import ConfigLoader, Settings
from .mail import ConsoleProvider, MailNotifier, MailService, SMTPProvider
from .mail.notifier import Notifier
from .orders import OrderService
from .payments import PaymentGateway, StripeGateway
from .store import MemoryRecordStore, RecordStore

logger = logging.getLogger("storefront")


def build_mail_service(settings: Settings) -> MailService:
    mail = settings.mail
    if mail.provider == "smtp":
        providers = [
            SMTPProvider(
                host=mail.host,
                port=mail.port,
                username=mail.username,
                password=mail.password,
                use_tls=mail.use_tls,
                timeout=mail.timeout,
            )
        ]
    else:
        providers = [ConsoleProvider()]
    return MailService(
        providers,
        default_from=mail.default_from,
        subject_prefix=mail.subject_prefix,
        enabled=mail.enabled,
    )


def build_order_service(
    settings: Optional[Settings] = None,
    *,
    store: Optional[RecordStore] = None,
    gateway: Optional[PaymentGateway] = None,
    notifier: Optional[Notifier] = None,
) -> OrderService:
    """
    Wire the order engine.

    Anything not passed in is built from *settings*: a MemoryRecordStore,
    a StripeGateway (needs ``payment.api_key``) and a MailNotifier.
    """
    settings = settings or Settings.from_loader(ConfigLoader.load())
    store = store or MemoryRecordStore()
    if gateway is None:
        gateway = StripeGateway(
            settings.payment.api_key or "",
            currency=settings.payment.currency,
            api_version=settings.payment.api_version,
        )
    if notifier is None:
        notifier = MailNotifier(build_mail_service(settings))

    logger.info(
        f"Order service ready (gateway={type(gateway).__name__}, "
        f"mail={settings.mail.provider if settings.mail.enabled else 'disabled'})"
    )
    return OrderService(store, gateway, notifier, settings=settings)
