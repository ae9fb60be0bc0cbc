"""
Tests for the fault taxonomy, status classification and ResponseMapper.
"""

import logging

import pytest

from storefront.faults import (
    DOMAIN_DEFAULTS,
    Fault,
    FaultDomain,
    ForbiddenFault,
    InsufficientStockFault,
    InvalidTransitionFault,
    NotFoundFault,
    PaymentFault,
    ResponseMapper,
    Severity,
    StatusClass,
    ValidationFault,
    log_fault,
)
from storefront.orders import OrderNotFoundFault
from storefront.products import ProductNotFoundFault


class TestFault:

    def test_basic_fault(self):
        f = Fault(code="ERR", message="Something wrong", domain=FaultDomain.SYSTEM)
        assert f.severity == Severity.FATAL  # Default for SYSTEM
        assert f.retryable is False
        assert f.public is False
        assert str(f) == "[ERR] Something wrong"

    def test_domain_defaults(self):
        f = Fault(code="X", message="m", domain=FaultDomain.PAYMENT)
        assert f.severity == DOMAIN_DEFAULTS[FaultDomain.PAYMENT]["severity"]
        assert f.retryable is True

    def test_missing_required_raises(self):
        with pytest.raises(TypeError):
            Fault(message="no code")

    def test_to_dict(self):
        d = ValidationFault("bad", field="qty").to_dict()
        assert d["code"] == "VALIDATION_FAILED"
        assert d["status_code"] == 400
        assert d["status_class"] == "client"
        assert d["metadata"] == {"field": "qty"}


class TestTaxonomy:

    @pytest.mark.parametrize("fault, code, status, status_class", [
        (ValidationFault("x"), "VALIDATION_FAILED", 400, StatusClass.CLIENT),
        (NotFoundFault("x"), "NOT_FOUND", 404, StatusClass.CLIENT),
        (ProductNotFoundFault("x"), "PRODUCT_NOT_FOUND", 404, StatusClass.CLIENT),
        (OrderNotFoundFault("x"), "ORDER_NOT_FOUND", 404, StatusClass.CLIENT),
        (InsufficientStockFault("Lamp", 0, 1), "INSUFFICIENT_STOCK", 400, StatusClass.CLIENT),
        (InvalidTransitionFault(), "INVALID_ORDER_TRANSITION", 400, StatusClass.CLIENT),
        (ForbiddenFault(), "FORBIDDEN", 403, StatusClass.CLIENT),
        (PaymentFault("boom"), "PAYMENT_FAILED", 502, StatusClass.DEPENDENCY),
    ])
    def test_classification(self, fault, code, status, status_class):
        assert fault.code == code
        assert fault.status_code == status
        assert fault.status_class == status_class
        assert fault.is_client_error == (status_class == StatusClass.CLIENT)

    def test_not_found_messages(self):
        assert OrderNotFoundFault("o1").message == "Order 'o1' does not exist."
        assert OrderNotFoundFault().message == "Order not found"
        assert isinstance(ProductNotFoundFault("p"), NotFoundFault)

    def test_payment_fault_records_cause(self):
        f = PaymentFault("Refund processing failed: x", operation="refund", cause=ValueError("x"))
        assert f.metadata == {"operation": "refund", "cause": "ValueError: x"}


class TestResponseMapper:

    def test_client_fault(self):
        response = ResponseMapper().map(InsufficientStockFault("Lamp", 1, 2, product_id="p1"))
        assert response.status_code == 400
        assert response.status_class == StatusClass.CLIENT
        assert response.body["error"]["message"] == "Insufficient stock for product: Lamp"
        assert response.body["error"]["metadata"]["product_id"] == "p1"

    def test_private_fault_message_masked(self):
        fault = Fault(code="SECRET", message="db password wrong", domain=FaultDomain.SYSTEM)
        response = ResponseMapper().map(fault)
        assert response.status_code == 500
        assert response.body["error"]["message"] == "Internal server error"

    def test_plain_exception_masked(self):
        response = ResponseMapper().map(RuntimeError("boom"))
        assert response.status_code == 500
        assert response.status_class == StatusClass.SERVER
        assert response.body["error"]["code"] == "INTERNAL_ERROR"

    def test_log_level_follows_severity(self, caplog):
        with caplog.at_level(logging.INFO, logger="storefront.faults"):
            log_fault(PaymentFault("down"))
            log_fault(ForbiddenFault())
        levels = [r.levelno for r in caplog.records]
        assert levels == [logging.ERROR, logging.WARNING]
        assert caplog.records[0].fault["code"] == "PAYMENT_FAILED"
