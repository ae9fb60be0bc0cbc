"""
Storefront Faults - Core types and fault taxonomy.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
- StatusClass (who is to blame: the caller or a dependency)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines the logging level used when the fault is reported.
    """
    INFO = "info"       # Informational, no action needed
    WARN = "warn"       # Warning, should be reviewed
    ERROR = "error"     # Error, immediate attention
    FATAL = "fatal"     # Fatal, unrecoverable


class StatusClass(str, Enum):
    """Classification surfaced to callers alongside the status code."""
    CLIENT = "client"
    DEPENDENCY = "dependency"
    SERVER = "server"


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


# Standard Domains
FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.INPUT = FaultDomain("input", "Malformed or missing caller input")
FaultDomain.CATALOG = FaultDomain("catalog", "Products and inventory")
FaultDomain.ORDERS = FaultDomain("orders", "Order lifecycle")
FaultDomain.SECURITY = FaultDomain("security", "Ownership and role checks")
FaultDomain.PAYMENT = FaultDomain("payment", "Payment gateway calls")
FaultDomain.MAIL = FaultDomain("mail", "Notification delivery")
FaultDomain.SYSTEM = FaultDomain("system", "System level faults")


DOMAIN_DEFAULTS = {
    FaultDomain.CONFIG: {"severity": Severity.FATAL, "retryable": False},
    FaultDomain.INPUT: {"severity": Severity.WARN, "retryable": False},
    FaultDomain.CATALOG: {"severity": Severity.WARN, "retryable": False},
    FaultDomain.ORDERS: {"severity": Severity.WARN, "retryable": False},
    FaultDomain.SECURITY: {"severity": Severity.WARN, "retryable": False},
    FaultDomain.PAYMENT: {"severity": Severity.ERROR, "retryable": True},
    FaultDomain.MAIL: {"severity": Severity.WARN, "retryable": True},
    FaultDomain.SYSTEM: {"severity": Severity.FATAL, "retryable": False},
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    A fault is a first-class value with:
    - Stable machine-readable code
    - Human-readable message
    - Severity level
    - Domain classification
    - Retry semantics
    - Public exposure control
    - Status code and status class for the caller-facing layer

    Subclasses may declare ``code``, ``domain``, ``severity``,
    ``status_code`` and ``status_class`` as class attributes.

    Example:
        ```python
        raise Fault(
            code="ORDER_NOT_FOUND",
            message="Order 'o-1' does not exist.",
            domain=FaultDomain.ORDERS,
            public=True,
        )
        ```
    """

    status_code: int = 500
    status_class: StatusClass = StatusClass.SERVER

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        # Fallback to class attributes if not provided
        self.code = code if code is not None else getattr(self, "code", None)
        self.message = message if message is not None else getattr(self, "message", None)
        self.domain = domain if domain is not None else getattr(self, "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        defaults = DOMAIN_DEFAULTS.get(self.domain, {"severity": Severity.ERROR, "retryable": False})
        self.severity = severity or getattr(type(self), "severity", None) or defaults["severity"]
        self.retryable = retryable if retryable is not None else defaults["retryable"]
        self.public = public
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"Fault(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value}, public={self.public})"
        )

    @property
    def is_client_error(self) -> bool:
        return self.status_class == StatusClass.CLIENT

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize fault to dictionary.

        Returns:
            Dictionary representation suitable for logging/serialization
        """
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "public": self.public,
            "status_code": self.status_code,
            "status_class": self.status_class.value,
            "metadata": self.metadata,
        }
