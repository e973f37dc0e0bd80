"""Tests for rx_common.errors and rx_common.response."""

from src.rx_common.errors import (
    AppError,
    DuplicateTradeError,
    InsufficientBalanceError,
    InvalidPriceError,
    OrderOwnershipError,
    RequestAlreadyResolvedError,
    SelfRevokeError,
    SelfTradeError,
    VerificationCooldownError,
)
from src.rx_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1001, message="Username taken", http_status=409)
        assert err.http_status == 409

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_insufficient_balance(self) -> None:
        err = InsufficientBalanceError(required=20000, available=15000)
        assert err.code == 2001
        assert err.http_status == 422
        assert "20000" in err.message
        assert "15000" in err.message

    def test_invalid_price(self) -> None:
        err = InvalidPriceError(0)
        assert err.code == 3002
        assert err.http_status == 422

    def test_order_ownership(self) -> None:
        err = OrderOwnershipError("ORD-1")
        assert err.code == 3005
        assert err.http_status == 403

    def test_self_trade(self) -> None:
        err = SelfTradeError()
        assert err.code == 4001
        assert err.http_status == 422

    def test_duplicate_trade_is_conflict(self) -> None:
        err = DuplicateTradeError("key-1")
        assert err.code == 4002
        assert err.http_status == 409
        assert "key-1" in err.message

    def test_already_resolved(self) -> None:
        err = RequestAlreadyResolvedError("REQ-1", "approved")
        assert err.code == 5002
        assert err.http_status == 409
        assert "approved" in err.message

    def test_cooldown_carries_retry_at(self) -> None:
        err = VerificationCooldownError("2026-03-02T10:00:00+00:00")
        assert err.code == 5005
        assert err.http_status == 429
        assert err.retry_at == "2026-03-02T10:00:00+00:00"

    def test_self_revoke(self) -> None:
        err = SelfRevokeError()
        assert err.code == 1007
        assert err.http_status == 422


class TestApiResponse:
    def test_success_defaults(self) -> None:
        resp = success_response({"x": 1})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"x": 1}
        assert resp.request_id.startswith("req_")
        assert resp.timestamp

    def test_error_has_no_data(self) -> None:
        resp = error_response(3004, "Order not found: X")
        assert resp.code == 3004
        assert resp.data is None

    def test_request_id_from_request_state(self) -> None:
        class _State:
            request_id = "req_abc123"

        class _Request:
            state = _State()

        resp = success_response(None, _Request())  # type: ignore[arg-type]
        assert resp.request_id == "req_abc123"

    def test_model_dump_shape(self) -> None:
        dumped = ApiResponse().model_dump()
        assert set(dumped) == {"code", "message", "data", "timestamp", "request_id"}
