from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from http import HTTPStatus
from typing import Callable
from wsgiref.simple_server import make_server

from expense_mailer.mailer_service import (
    InvalidRequest,
    PayloadTooLarge,
    ProviderError,
    send_expense_report,
)
from expense_mailer.models import ErrorCode, MailerError, MailerSettings

logger = logging.getLogger(__name__)

SEND_EXPENSE_REPORT_PATH = "/api/send-expense-report"
CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"
CORS_ALLOW_METHODS = "GET, POST, OPTIONS"

_CLIENT_ERROR_CODES = {
    ErrorCode.INVALID_REQUEST: HTTPStatus.BAD_REQUEST,
    ErrorCode.MISSING_FIELDS: HTTPStatus.BAD_REQUEST,
    ErrorCode.PAYLOAD_TOO_LARGE: HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
}


def run_api_server(settings: MailerSettings) -> None:
    with make_server(settings.api_host, settings.api_port, create_app(settings)) as server:
        logger.info("expense-mailer listening on http://%s:%s", settings.api_host, settings.api_port)
        server.serve_forever()


def create_app(settings: MailerSettings) -> Callable:
    cors_headers = [
        ("Access-Control-Allow-Origin", settings.cors_allow_origin),
        ("Access-Control-Allow-Headers", CORS_ALLOW_HEADERS),
    ]

    def app(environ: dict, start_response):  # type: ignore[no-untyped-def]
        method = environ.get("REQUEST_METHOD", "GET")
        path = environ.get("PATH_INFO", "")
        try:
            if method == "OPTIONS":
                start_response(
                    f"{HTTPStatus.NO_CONTENT.value} {HTTPStatus.NO_CONTENT.phrase}",
                    [*cors_headers, ("Access-Control-Allow-Methods", CORS_ALLOW_METHODS)],
                )
                return [b""]

            if method == "GET" and path == "/health":
                return _json(
                    start_response,
                    HTTPStatus.OK,
                    {"status": "OK", "timestamp": datetime.now(UTC).isoformat()},
                    cors_headers,
                )

            if method == "POST" and path == SEND_EXPENSE_REPORT_PATH:
                payload = _read_json(environ, settings.max_body_bytes)
                send_expense_report(payload, settings)
                return _json(
                    start_response,
                    HTTPStatus.OK,
                    {"success": True, "message": "Email sent successfully"},
                    cors_headers,
                )

            return _json(start_response, HTTPStatus.NOT_FOUND, {"error": "NOT_FOUND"}, cors_headers)
        except ProviderError as exc:
            logger.warning("email provider rejected request status=%s detail=%s", exc.status, exc.detail)
            return _error(start_response, HTTPStatus.INTERNAL_SERVER_ERROR, exc, cors_headers)
        except MailerError as exc:
            status = _CLIENT_ERROR_CODES.get(exc.code, HTTPStatus.INTERNAL_SERVER_ERROR)
            if status == HTTPStatus.INTERNAL_SERVER_ERROR:
                logger.error(
                    "expense report failed code=%s message=%s cause=%r",
                    exc.code.value,
                    exc,
                    exc.__cause__,
                )
            else:
                logger.warning("expense report rejected code=%s message=%s", exc.code.value, exc)
            return _error(start_response, status, exc, cors_headers)
        except Exception:  # pragma: no cover
            logger.exception("unexpected error method=%s path=%s", method, path)
            return _json(
                start_response,
                HTTPStatus.INTERNAL_SERVER_ERROR,
                {"error": "INTERNAL_ERROR", "message": "Internal server error"},
                cors_headers,
            )

    return app


def _read_json(environ: dict, max_body_bytes: int) -> object:
    try:
        body_size = int(environ.get("CONTENT_LENGTH", "0") or "0")
    except ValueError as exc:
        raise InvalidRequest("invalid Content-Length") from exc
    if body_size > max_body_bytes:
        raise PayloadTooLarge(max_body_bytes)
    body = environ["wsgi.input"].read(body_size) if body_size > 0 else b""
    if not body:
        raise InvalidRequest("request body is empty")
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise InvalidRequest("request body is not valid JSON") from exc


def _error(start_response, status: HTTPStatus, exc: MailerError, extra_headers: list):  # type: ignore[no-untyped-def]
    return _json(
        start_response,
        status,
        {"error": exc.code.value, "message": str(exc)},
        extra_headers,
    )


def _json(start_response, status: HTTPStatus, payload: dict, extra_headers: list):  # type: ignore[no-untyped-def]
    body = json.dumps(payload, ensure_ascii=True).encode("utf-8")
    start_response(
        f"{status.value} {status.phrase}",
        [
            ("Content-Type", "application/json; charset=utf-8"),
            ("Content-Length", str(len(body))),
            *extra_headers,
        ],
    )
    return [body]
