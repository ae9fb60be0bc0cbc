"""
Storefront Mail Messages.

EmailMessage is the unit handed to mail providers: validated addresses,
a subject and a plain-text body (optionally an HTML alternative).
"""

from __future__ import annotations

import re
import uuid
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid
from typing import Dict, List, Optional, Sequence

from .faults import MailValidationFault

# Basic email regex for fast validation (not RFC-complete but practical)
_EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*$"
)


def _validate_email(addr: str, field_name: str = "email") -> str:
    """Validate and normalise a single email address."""
    addr = (addr or "").strip()
    if not addr:
        raise MailValidationFault(f"Empty {field_name} address", field=field_name)
    # Handle "Display Name <addr>" format
    if "<" in addr and addr.endswith(">"):
        raw = addr.rsplit("<", 1)[1].rstrip(">").strip()
    else:
        raw = addr
    if not _EMAIL_RE.match(raw):
        raise MailValidationFault(
            f"Invalid {field_name} address: {addr!r}", field=field_name
        )
    return addr


def _extract_domain(email: str) -> str:
    if "<" in email:
        email = email.split("<")[1].rstrip(">")
    return email.rsplit("@", 1)[-1] if "@" in email else "localhost"


class EmailMessage:
    """
    A single email message.

    Usage:
        msg = EmailMessage(
            subject="Order Confirmation - Order #42",
            body="Thank you for your order!",
            to=["user@example.com"],
        )
        await mail_service.send_message(msg)
    """

    def __init__(
        self,
        subject: str = "",
        body: str = "",
        from_email: Optional[str] = None,
        to: Optional[Sequence[str]] = None,
        html_body: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.id = uuid.uuid4().hex
        self.subject = subject
        self.body = body
        self.html_body = html_body
        self.from_email = _validate_email(from_email, "from") if from_email else None
        self.to: List[str] = [_validate_email(a, "to") for a in (to or [])]
        self.extra_headers = headers or {}
        if not self.to:
            raise MailValidationFault("Message has no recipients", field="to")

    def __repr__(self) -> str:
        return f"<EmailMessage to={self.to} subject={self.subject!r}>"

    def to_mime(self, default_from: str) -> MIMEMultipart:
        """Build the MIME representation (text, plus HTML alternative if set)."""
        sender = self.from_email or default_from
        msg = MIMEMultipart("alternative")
        msg["From"] = sender
        msg["To"] = ", ".join(self.to)
        msg["Subject"] = self.subject
        msg["Date"] = formatdate(localtime=True)
        msg["Message-ID"] = make_msgid(domain=_extract_domain(sender))
        for key, value in self.extra_headers.items():
            msg[key] = value
        msg.attach(MIMEText(self.body, "plain", "utf-8"))
        if self.html_body:
            msg.attach(MIMEText(self.html_body, "html", "utf-8"))
        return msg
