"""
Orders Module — Fault Definitions
"""

from ..faults import FaultDomain, NotFoundFault, Severity, ValidationFault


class OrderNotFoundFault(NotFoundFault):
    domain = FaultDomain.ORDERS
    severity = Severity.WARN
    code = "ORDER_NOT_FOUND"
    entity = "Order"


class EmptyOrderFault(ValidationFault):
    def __init__(self):
        super().__init__("No order items", field="order_items")
