"""
Storefront Faults - Domain-specific fault types.

The caller-facing taxonomy:
- ValidationFault         (400, client)
- NotFoundFault           (404, client)
- InsufficientStockFault  (400, client)
- InvalidTransitionFault  (400, client)
- ForbiddenFault          (403, client)
- PaymentFault            (502, dependency)

Module packages (orders, products, users) subclass these with their own
codes; the status classification is inherited.
"""

from typing import Any, Optional

from .core import Fault, FaultDomain, Severity, StatusClass


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Configuration is missing or invalid."""

    domain = FaultDomain.CONFIG

    def __init__(self, key: str, reason: str):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            domain=self.domain,
            severity=Severity.FATAL,
            metadata={"key": key, "reason": reason},
        )


# ============================================================================
# Client Faults
# ============================================================================

class ValidationFault(Fault):
    """Malformed or missing required input."""

    domain = FaultDomain.INPUT
    code = "VALIDATION_FAILED"
    status_code = 400
    status_class = StatusClass.CLIENT

    def __init__(self, detail: str = "", *, field: Optional[str] = None):
        metadata = {"field": field} if field else {}
        super().__init__(
            code=self.code,
            message=detail or "Validation failed",
            domain=self.domain,
            public=True,
            metadata=metadata,
        )


class NotFoundFault(Fault):
    """A referenced record does not exist."""

    domain = FaultDomain.SYSTEM
    severity = Severity.WARN
    code = "NOT_FOUND"
    status_code = 404
    status_class = StatusClass.CLIENT
    entity = "Record"

    def __init__(self, identifier: Any = ""):
        super().__init__(
            code=self.code,
            message=self.describe(identifier),
            domain=self.domain,
            severity=self.severity,
            public=True,
            metadata={"id": str(identifier)} if identifier else {},
        )

    def describe(self, identifier: Any) -> str:
        if identifier:
            return f"{self.entity} '{identifier}' does not exist."
        return f"{self.entity} not found"


class InsufficientStockFault(Fault):
    """Requested quantity exceeds what is in stock."""

    domain = FaultDomain.CATALOG
    severity = Severity.WARN
    code = "INSUFFICIENT_STOCK"
    status_code = 400
    status_class = StatusClass.CLIENT

    def __init__(self, product_name: str = "", available: int = 0, requested: int = 0,
                 *, product_id: Optional[str] = None):
        if product_name:
            msg = f"Insufficient stock for product: {product_name}"
        else:
            msg = "Insufficient stock"
        super().__init__(
            code=self.code,
            message=msg,
            domain=self.domain,
            severity=self.severity,
            public=True,
            metadata={"product_id": product_id, "available": available, "requested": requested},
        )


class InvalidTransitionFault(Fault):
    """Operation not permitted in the order's current status."""

    domain = FaultDomain.ORDERS
    severity = Severity.WARN
    code = "INVALID_ORDER_TRANSITION"
    status_code = 400
    status_class = StatusClass.CLIENT

    def __init__(self, message: str = "Invalid order status transition", *,
                 from_status: str = "", operation: str = ""):
        super().__init__(
            code=self.code,
            message=message,
            domain=self.domain,
            severity=self.severity,
            public=True,
            metadata={"from_status": from_status, "operation": operation},
        )


class ForbiddenFault(Fault):
    """Caller lacks ownership or role."""

    domain = FaultDomain.SECURITY
    severity = Severity.WARN
    code = "FORBIDDEN"
    status_code = 403
    status_class = StatusClass.CLIENT

    def __init__(self, reason: str = "Insufficient permissions"):
        super().__init__(
            code=self.code,
            message=reason,
            domain=self.domain,
            severity=self.severity,
            retryable=False,
            public=True,
        )


# ============================================================================
# Dependency Faults
# ============================================================================

class PaymentFault(Fault):
    """Payment gateway call failed, timed out, or returned an error status."""

    domain = FaultDomain.PAYMENT
    severity = Severity.ERROR
    code = "PAYMENT_FAILED"
    status_code = 502
    status_class = StatusClass.DEPENDENCY

    def __init__(self, reason: str = "", *, operation: str = "", cause: Optional[BaseException] = None):
        msg = reason or "Payment processing failed"
        metadata: dict[str, Any] = {"operation": operation}
        if cause is not None:
            metadata["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(
            code=self.code,
            message=msg,
            domain=self.domain,
            severity=self.severity,
            public=True,
            metadata=metadata,
        )
