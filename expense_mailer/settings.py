from __future__ import annotations

import os

from dotenv import load_dotenv

from expense_mailer.models import MailerSettings


def load_settings() -> MailerSettings:
    load_dotenv()
    timeout_raw = os.getenv("RESEND_TIMEOUT_SEC", "")
    return MailerSettings(
        resend_api_key=os.getenv("RESEND_API_KEY", ""),
        resend_api_url=os.getenv("RESEND_API_URL", "https://api.resend.com/emails"),
        resend_timeout_sec=float(timeout_raw) if timeout_raw else None,
        api_host=os.getenv("API_HOST", "0.0.0.0"),
        api_port=int(os.getenv("API_PORT", "3001")),
        max_body_bytes=int(os.getenv("MAX_BODY_BYTES", str(20 * 1024 * 1024))),
        cors_allow_origin=os.getenv("CORS_ALLOW_ORIGIN", "*"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
