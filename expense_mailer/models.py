from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ErrorCode(str, Enum):
    INVALID_REQUEST = "INVALID_REQUEST"
    MISSING_FIELDS = "MISSING_FIELDS"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
    DELIVERY_ERROR = "DELIVERY_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"


@dataclass(frozen=True)
class EmailRequest:
    name: str
    email: str
    pps: str
    pdf_data: str

    def missing_fields(self) -> list[str]:
        values = {
            "name": self.name,
            "email": self.email,
            "pps": self.pps,
            "pdfData": self.pdf_data,
        }
        return [key for key, value in values.items() if not value]


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: str
    type: str

    def to_dict(self) -> dict[str, str]:
        return {"filename": self.filename, "content": self.content, "type": self.type}


@dataclass(frozen=True)
class OutboundEmail:
    sender: str
    to: list[str]
    subject: str
    html: str
    attachments: list[Attachment] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "from": self.sender,
            "to": list(self.to),
            "subject": self.subject,
            "html": self.html,
            "attachments": [item.to_dict() for item in self.attachments],
        }


@dataclass(frozen=True)
class MailerSettings:
    resend_api_key: str
    resend_api_url: str = "https://api.resend.com/emails"
    resend_timeout_sec: float | None = None
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    max_body_bytes: int = 20 * 1024 * 1024
    cors_allow_origin: str = "*"
    log_level: str = "INFO"


class MailerError(RuntimeError):
    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
