"""
Tests for cart and combo exceptions and their HTTP translation in utils/error_handler.py
"""
import pytest

from exceptions import (
    StorefrontException,
    CartException,
    InvalidCartError,
    EmptyCartError,
    UnknownProductError,
    InvalidQuantityError,
    ComboException,
    InvalidConfigurationError,
    ComputationBoundExceeded,
)
from utils.error_handler import handle_service_error


class TestExceptionHierarchy:
    """Every cart fault is an InvalidCartError; combo faults are not."""

    @pytest.mark.parametrize("exc", [
        EmptyCartError(),
        UnknownProductError(product_id="pho"),
        InvalidQuantityError(product_id="banh-mi", quantity=0),
    ])
    def test_cart_faults_are_invalid_cart(self, exc):
        assert isinstance(exc, InvalidCartError)
        assert isinstance(exc, CartException)
        assert isinstance(exc, StorefrontException)

    def test_combo_faults(self):
        exc = InvalidConfigurationError(entity="combo", entity_id="c1", reason="negative price -1")

        assert isinstance(exc, ComboException)
        assert not isinstance(exc, InvalidCartError)

    def test_unknown_product_attributes(self):
        exc = UnknownProductError(product_id="pho")

        assert exc.product_id == "pho"
        assert str(exc) == "Invalid cart: product pho not found"
        assert exc.details == {"product_id": "pho"}

    def test_computation_bound_message(self):
        exc = ComputationBoundExceeded(tuple_count=85766121, limit=20000)

        assert exc.tuple_count == 85766121
        assert str(exc) == "Combo search space of 85766121 tuples exceeds limit 20000"

    def test_repr_includes_details(self):
        exc = InvalidQuantityError(product_id="banh-mi", quantity=-2)

        assert repr(exc) == (
            "InvalidQuantityError('Invalid cart: quantity -2 for product banh-mi must be a positive integer', "
            "product_id=banh-mi, quantity=-2)"
        )

    def test_repr_without_details(self):
        assert repr(StorefrontException("boom")) == "StorefrontException('boom')"


class TestHandleServiceError:

    def test_empty_cart(self):
        assert handle_service_error(EmptyCartError(), lang="vi") == (400, "Danh sách sản phẩm là bắt buộc")

    def test_unknown_product_formats_id(self):
        assert handle_service_error(UnknownProductError(product_id="pho"), lang="en") == (
            400, "Product pho not found"
        )

    def test_invalid_quantity(self):
        status_code, message = handle_service_error(
            InvalidQuantityError(product_id="banh-mi", quantity=0), lang="vi"
        )

        assert status_code == 400
        assert message == "Số lượng của sản phẩm banh-mi phải là số nguyên dương"

    def test_generic_invalid_cart(self):
        assert handle_service_error(InvalidCartError("malformed line"), lang="vi") == (400, "Giỏ hàng không hợp lệ")

    def test_invalid_configuration_is_server_fault(self):
        exc = InvalidConfigurationError(entity="product", entity_id="p1", reason="negative price -5")

        status_code, message = handle_service_error(exc, lang="en")

        assert status_code == 500
        assert message == "Combo or product data is currently inconsistent. Please try again later."
        assert "negative price" not in message

    def test_unmapped_exception_is_generic_server_error(self, caplog):
        exc = ComputationBoundExceeded(tuple_count=100, limit=10)

        status_code, message = handle_service_error(exc, lang="vi")

        assert status_code == 500
        assert message == "Lỗi server khi tính toán giá"
        assert "Unmapped exception type: ComputationBoundExceeded" in caplog.text
