"""
Error taxonomy and LogError decoding tests.

Run with:
    pytest tests/test_errors.py -v
"""

import pytest

from orderguard.exceptions import OrderGuardException
from orderguard.exchange.errors import (
    ExchangeContractErr,
    ExchangeContractErrCode,
    OrderValidationError,
    error_from_log_code,
    raise_log_errors,
)


class TestLogErrorCodes:

    @pytest.mark.parametrize("code,kind", [
        (0, ExchangeContractErr.OrderFillExpired),
        (1, ExchangeContractErr.OrderRemainingFillAmountZero),
        (2, ExchangeContractErr.OrderFillRoundingError),
        (3, ExchangeContractErr.FillBalanceAllowanceError),
        (4, ExchangeContractErr.OrderCancelExpired),
        (5, ExchangeContractErr.OrderAlreadyCancelledOrFilled),
    ])
    def test_mapping(self, code, kind):
        assert error_from_log_code(code) == kind

    def test_every_code_mapped(self):
        for code in ExchangeContractErrCode:
            assert isinstance(error_from_log_code(code), ExchangeContractErr)

    def test_unknown_code(self):
        with pytest.raises(ValueError):
            error_from_log_code(6)


class TestRaiseLogErrors:

    def test_no_error_logs(self):
        raise_log_errors([{"event": "LogFill", "args": {}}])

    def test_first_error_raised(self):
        order_hash = "0x" + "ab" * 32
        logs = [
            {"event": "LogFill", "args": {}},
            {"event": "LogError", "args": {"errorId": 2, "orderHash": order_hash}},
            {"event": "LogError", "args": {"errorId": 0, "orderHash": order_hash}},
        ]
        with pytest.raises(OrderValidationError) as exc:
            raise_log_errors(logs)
        assert exc.value.kind == ExchangeContractErr.OrderFillRoundingError
        assert exc.value.order_hash == order_hash


class TestOrderValidationError:

    def test_hierarchy(self):
        error = OrderValidationError(ExchangeContractErr.InvalidSignature)
        assert isinstance(error, OrderGuardException)

    def test_message_is_kind_value(self):
        error = OrderValidationError(ExchangeContractErr.OrderFillExpired, order_hash="0x01")
        assert str(error) == "ORDER_FILL_EXPIRED"
        assert error.order_hash == "0x01"

    def test_kind_compares_as_string(self):
        assert ExchangeContractErr.InvalidSignature == "INVALID_SIGNATURE"
