"""
Storefront Faults - structured error handling.

Every error the order engine raises is a typed Fault carrying a stable
code, a domain, a severity and a caller-facing status classification.

Core exports:
- Fault, FaultDomain, Severity, StatusClass
- The caller-facing taxonomy (ValidationFault ... PaymentFault)
- ResponseMapper / FaultResponse / log_fault
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    StatusClass,
    DOMAIN_DEFAULTS,
)

from .domains import (
    ConfigFault,
    ValidationFault,
    NotFoundFault,
    InsufficientStockFault,
    InvalidTransitionFault,
    ForbiddenFault,
    PaymentFault,
)

from .mapping import FaultResponse, ResponseMapper, log_fault

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    "StatusClass",
    "DOMAIN_DEFAULTS",

    # Taxonomy
    "ConfigFault",
    "ValidationFault",
    "NotFoundFault",
    "InsufficientStockFault",
    "InvalidTransitionFault",
    "ForbiddenFault",
    "PaymentFault",

    # Mapping
    "FaultResponse",
    "ResponseMapper",
    "log_fault",
]
