from __future__ import annotations

import json
import logging

from expense_mailer.models import EmailRequest, ErrorCode, MailerError, MailerSettings
from expense_mailer.report_email import build_expense_report_email
from expense_mailer.resend_transport import DeliveryError, ProviderError, send_email

logger = logging.getLogger(__name__)

__all__ = [
    "ConfigurationError",
    "DeliveryError",
    "InvalidRequest",
    "MissingFields",
    "PayloadTooLarge",
    "ProviderError",
    "SerializationError",
    "parse_email_request",
    "send_expense_report",
]

_WIRE_FIELDS = ("name", "email", "pps", "pdfData")


class InvalidRequest(MailerError):
    def __init__(self, message: str = "Invalid request body") -> None:
        super().__init__(ErrorCode.INVALID_REQUEST, message)


class PayloadTooLarge(InvalidRequest):
    def __init__(self, limit: int) -> None:
        super().__init__(f"request body exceeds {limit} bytes")
        self.code = ErrorCode.PAYLOAD_TOO_LARGE


class MissingFields(MailerError):
    def __init__(self, fields: list[str]) -> None:
        super().__init__(ErrorCode.MISSING_FIELDS, "Missing required fields")
        self.fields = fields


class ConfigurationError(MailerError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.CONFIGURATION_ERROR, message)


class SerializationError(MailerError):
    def __init__(self, message: str = "Failed to prepare email data") -> None:
        super().__init__(ErrorCode.SERIALIZATION_ERROR, message)


def parse_email_request(payload: object) -> EmailRequest:
    if not isinstance(payload, dict):
        raise InvalidRequest("request body must be JSON object")
    values: dict[str, str] = {}
    for key in _WIRE_FIELDS:
        value = payload.get(key)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise InvalidRequest(f"invalid '{key}': expected string")
        values[key] = value
    request = EmailRequest(
        name=values["name"],
        email=values["email"],
        pps=values["pps"],
        pdf_data=values["pdfData"],
    )
    missing = request.missing_fields()
    if missing:
        raise MissingFields(missing)
    return request


def send_expense_report(payload: object, settings: MailerSettings) -> str | None:
    """Validate a submission and forward it to the email provider.

    Returns the provider message id, if any. Every failure exit raises a
    MailerError subclass; nothing is retried.
    """
    request = parse_email_request(payload)
    logger.info(
        "expense report received name=%s pdf_length=%s",
        request.name,
        len(request.pdf_data),
    )
    email = build_expense_report_email(request)

    if not settings.resend_api_key:
        raise ConfigurationError("RESEND_API_KEY not configured")

    try:
        body = json.dumps(email.to_dict()).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError() from exc

    message_id = send_email(
        body,
        api_key=settings.resend_api_key,
        api_url=settings.resend_api_url,
        timeout_sec=settings.resend_timeout_sec,
    )
    logger.info("expense report sent name=%s message_id=%s", request.name, message_id)
    return message_id
