import structlog
from shared.logging import LEVELS_BY_ENV, bind_caller, bind_request, clear_context, get_log_level, mask_sensitive


def _mask(**event):
    return mask_sensitive(None, "info", {"event": "Order received", **event})


class TestMaskSensitive:
    def test_account_number_keeps_last_four_digits(self):
        assert _mask(paymentAccountNumber="0712345678")["paymentAccountNumber"] == "***5678"

    def test_short_account_number_is_fully_hidden(self):
        assert _mask(account_number="123")["account_number"] == "***"

    def test_email_keeps_first_letter_and_domain(self):
        assert _mask(email="jane.doe@example.com")["email"] == "j***@example.com"

    def test_credentials_are_hidden(self):
        assert _mask(Authorization="Bearer abc")["Authorization"] == "***"

    def test_nested_payment_info_is_masked(self):
        masked = _mask(payment={"paymentAccountNumber": "0712345678", "typePayment": "Card"})
        assert masked["payment"] == {"paymentAccountNumber": "***5678", "typePayment": "Card"}

    def test_other_values_and_event_are_untouched(self):
        masked = _mask(order_number="ORD-20260101-ABC123", user_id="user-1", email=None)
        assert masked == {
            "event": "Order received",
            "order_number": "ORD-20260101-ABC123",
            "user_id": "user-1",
            "email": None,
        }


class TestLogLevel:
    def test_level_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("PROTEAN_ENV", "production")
        assert get_log_level() == LEVELS_BY_ENV["production"]

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level() == "ERROR"


class TestRequestContext:
    def test_bind_request_replaces_previous_context(self):
        bind_caller("user-1")
        bind_request("order-1-abcde", route="/orders/webhook", method="POST")
        bind_caller("user-2")

        assert structlog.contextvars.get_contextvars() == {
            "request_id": "order-1-abcde",
            "route": "/orders/webhook",
            "method": "POST",
            "user_id": "user-2",
        }
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
