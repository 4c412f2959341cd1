from __future__ import annotations

import io
import unittest
from http.client import BadStatusLine, IncompleteRead, RemoteDisconnected
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

from expense_mailer.models import ErrorCode
from expense_mailer.resend_transport import DeliveryError, ProviderError, send_email


def _opener_returning(status: int, body: bytes) -> MagicMock:
    opener = MagicMock()
    response = opener.open.return_value.__enter__.return_value
    response.status = status
    response.read.return_value = body
    return opener


class ResendTransportTests(unittest.TestCase):
    def test_posts_json_with_bearer_token(self) -> None:
        opener = _opener_returning(200, b'{"id": "49a3999c"}')
        with patch("expense_mailer.resend_transport.build_opener", return_value=opener):
            message_id = send_email(b'{"to": []}', api_key="re_123", api_url="https://api.resend.com/emails")
        self.assertEqual(message_id, "49a3999c")
        req = opener.open.call_args.args[0]
        self.assertEqual(req.full_url, "https://api.resend.com/emails")
        self.assertEqual(req.get_method(), "POST")
        self.assertEqual(req.data, b'{"to": []}')
        self.assertEqual(req.get_header("Authorization"), "Bearer re_123")
        self.assertEqual(req.get_header("Content-type"), "application/json")

    def test_timeout_only_passed_when_configured(self) -> None:
        opener = _opener_returning(200, b"{}")
        with patch("expense_mailer.resend_transport.build_opener", return_value=opener):
            send_email(b"{}", api_key="k", api_url="https://x")
            send_email(b"{}", api_key="k", api_url="https://x", timeout_sec=3.0)
        first, second = opener.open.call_args_list
        self.assertNotIn("timeout", first.kwargs)
        self.assertEqual(second.kwargs["timeout"], 3.0)

    def test_non_json_success_body_yields_no_id(self) -> None:
        opener = _opener_returning(200, b"accepted")
        with patch("expense_mailer.resend_transport.build_opener", return_value=opener):
            self.assertIsNone(send_email(b"{}", api_key="k", api_url="https://x"))

    def test_non_200_success_status_is_provider_error(self) -> None:
        opener = _opener_returning(202, b'{"id": "x"}')
        with patch("expense_mailer.resend_transport.build_opener", return_value=opener):
            with self.assertRaises(ProviderError) as ctx:
                send_email(b"{}", api_key="k", api_url="https://x")
        self.assertEqual(ctx.exception.status, 202)

    def test_http_error_is_provider_error_with_hidden_detail(self) -> None:
        opener = MagicMock()
        opener.open.side_effect = HTTPError(
            "https://x",
            422,
            "Unprocessable",
            {},
            io.BytesIO(b'{"message": "invalid from"}'),
        )
        with patch("expense_mailer.resend_transport.build_opener", return_value=opener):
            with self.assertRaises(ProviderError) as ctx:
                send_email(b"{}", api_key="k", api_url="https://x")
        self.assertEqual(ctx.exception.code, ErrorCode.PROVIDER_ERROR)
        self.assertEqual(ctx.exception.status, 422)
        self.assertIn("invalid from", ctx.exception.detail)
        self.assertEqual(str(ctx.exception), "Email service returned error")

    def test_transport_failure_is_delivery_error(self) -> None:
        for error in (
            URLError("connection refused"),
            TimeoutError("timed out"),
            BadStatusLine("garbage"),
            RemoteDisconnected("closed"),
        ):
            opener = MagicMock()
            opener.open.side_effect = error
            with self.subTest(error=error), patch(
                "expense_mailer.resend_transport.build_opener",
                return_value=opener,
            ):
                with self.assertRaises(DeliveryError) as ctx:
                    send_email(b"{}", api_key="k", api_url="https://x")
                self.assertEqual(ctx.exception.code, ErrorCode.DELIVERY_ERROR)

    def test_truncated_success_body_is_delivery_error(self) -> None:
        opener = _opener_returning(200, b"")
        opener.open.return_value.__enter__.return_value.read.side_effect = IncompleteRead(b"{")
        with patch("expense_mailer.resend_transport.build_opener", return_value=opener):
            with self.assertRaises(DeliveryError):
                send_email(b"{}", api_key="k", api_url="https://x")

    def test_unreadable_error_body_still_provider_error(self) -> None:
        error = HTTPError("https://x", 500, "Server Error", {}, io.BytesIO(b""))
        error.read = MagicMock(side_effect=IncompleteRead(b"{"))
        opener = MagicMock()
        opener.open.side_effect = error
        with patch("expense_mailer.resend_transport.build_opener", return_value=opener):
            with self.assertRaises(ProviderError) as ctx:
                send_email(b"{}", api_key="k", api_url="https://x")
        self.assertEqual(ctx.exception.status, 500)
        self.assertEqual(ctx.exception.detail, "")


if __name__ == "__main__":
    unittest.main()
