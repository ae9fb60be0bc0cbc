"""
Products Module — Fault Definitions
"""

from ..faults import FaultDomain, NotFoundFault, Severity


class ProductNotFoundFault(NotFoundFault):
    domain = FaultDomain.CATALOG
    severity = Severity.WARN
    code = "PRODUCT_NOT_FOUND"
    entity = "Product"

    def describe(self, identifier) -> str:
        return f"Product not found: {identifier}" if identifier else "Product not found"
