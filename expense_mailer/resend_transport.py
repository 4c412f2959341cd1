from __future__ import annotations

import json
import logging
from http.client import HTTPException
from urllib.error import HTTPError
from urllib.request import Request, build_opener

from expense_mailer.models import ErrorCode, MailerError

LOGGER = logging.getLogger(__name__)


class DeliveryError(MailerError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.DELIVERY_ERROR, message)


class ProviderError(MailerError):
    def __init__(self, status: int, detail: str) -> None:
        super().__init__(ErrorCode.PROVIDER_ERROR, "Email service returned error")
        self.status = status
        self.detail = detail


def send_email(
    body: bytes,
    *,
    api_key: str,
    api_url: str,
    timeout_sec: float | None = None,
) -> str | None:
    """POST a serialized email to the provider once.

    Returns the provider message id when the response carries one. Any status
    other than 200 raises ProviderError; transport failures raise DeliveryError.
    """
    req = Request(
        api_url,
        data=body,
        method="POST",
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        },
    )
    open_kwargs: dict[str, float] = {}
    if timeout_sec is not None:
        open_kwargs["timeout"] = timeout_sec

    opener = build_opener()
    try:
        with opener.open(req, **open_kwargs) as response:  # type: ignore[arg-type]
            status = response.status
            raw = response.read()
    except HTTPError as exc:
        raise ProviderError(exc.code, _read_error_body(exc)) from exc
    except (OSError, HTTPException) as exc:
        raise DeliveryError("Failed to send email") from exc

    if status != 200:
        raise ProviderError(status, _safe_decode(raw))
    return _extract_message_id(raw)


def _read_error_body(exc: HTTPError) -> str:
    if exc.fp is None:
        return ""
    try:
        return _safe_decode(exc.read())
    except (OSError, HTTPException):
        LOGGER.debug("provider error body unreadable status=%s", exc.code)
        return ""


def _extract_message_id(raw: bytes) -> str | None:
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        LOGGER.debug("provider response is not JSON length=%s", len(raw))
        return None
    if isinstance(payload, dict) and isinstance(payload.get("id"), str):
        return payload["id"]
    return None


def _safe_decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")
