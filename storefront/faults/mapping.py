"""
Storefront Faults - Response mapping and fault logging.

1. ResponseMapper: Map faults (and stray exceptions) to a status code,
   status class and a public error body for whatever layer sits on top.
2. log_fault: Log a fault at the level matching its severity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .core import Fault, Severity, StatusClass


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


@dataclass(frozen=True, slots=True)
class FaultResponse:
    """Caller-facing representation of a failed operation."""
    status_code: int
    status_class: StatusClass
    body: dict[str, Any] = field(default_factory=dict)


class ResponseMapper:
    """
    Map faults to caller-facing responses.

    Client faults keep their message and metadata; anything that is not a
    Fault is masked as an internal error.

    Usage:
        ```python
        mapper = ResponseMapper()
        try:
            await orders.refund_order(order_id, identity)
        except Exception as exc:
            response = mapper.map(exc)
        ```
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("storefront.faults")

    def map(self, exc: BaseException) -> FaultResponse:
        if not isinstance(exc, Fault):
            self.logger.exception("Unhandled error: %s", exc, exc_info=exc)
            return FaultResponse(
                status_code=500,
                status_class=StatusClass.SERVER,
                body={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
            )

        log_fault(exc, self.logger)

        body: dict[str, Any] = {
            "error": {
                "code": exc.code,
                "message": exc.message if exc.public else "Internal server error",
                "domain": exc.domain.value,
                "severity": exc.severity.value,
            }
        }
        if exc.public and exc.metadata:
            body["error"]["metadata"] = exc.metadata

        return FaultResponse(
            status_code=exc.status_code,
            status_class=exc.status_class,
            body=body,
        )


def log_fault(fault: Fault, logger: Optional[logging.Logger] = None) -> None:
    """Log fault with structured metadata."""
    logger = logger or logging.getLogger("storefront.faults")
    logger.log(
        _LOG_LEVELS[fault.severity],
        f"[{fault.domain.value}] {fault.code}: {fault.message}",
        extra={"fault": fault.to_dict()},
    )
