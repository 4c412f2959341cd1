from __future__ import annotations

from expense_mailer.models import Attachment, EmailRequest, OutboundEmail

SENDER = "Nexus Ventures Expense Report <log@happydreamsireland.com>"
RECIPIENT = "jesus@irishtaxagents.com"
ATTACHMENT_FILENAME = "expense-report.pdf"
ATTACHMENT_TYPE = "application/pdf"

_ROW_STYLE = "padding: 8px; border-bottom: 1px solid #e2e8f0;"


def build_subject(name: str) -> str:
    return f"Nuevo Expense Report - {name}"


def render_html(request: EmailRequest) -> str:
    """Render the notification body.

    Submitted values are inserted verbatim, without HTML escaping.
    """
    rows = "".join(
        _render_row(label, value)
        for label, value in (
            ("Nombre", request.name),
            ("Email", request.email),
            ("PPS", request.pps),
        )
    )
    return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h1 style="color: #1a365d; border-bottom: 2px solid #1a365d; padding-bottom: 10px;">
            Nuevo Expense Report
          </h1>

          <p style="font-size: 16px; margin: 20px 0;">
            Se ha recibido un nuevo expense report.
          </p>

          <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">{rows}
          </table>

          <p style="font-size: 14px; color: #666; margin: 20px 0;">
            El PDF del expense report está adjunto.
          </p>
        </div>
      """


def build_expense_report_email(request: EmailRequest) -> OutboundEmail:
    return OutboundEmail(
        sender=SENDER,
        to=[RECIPIENT],
        subject=build_subject(request.name),
        html=render_html(request),
        attachments=[
            Attachment(
                filename=ATTACHMENT_FILENAME,
                content=request.pdf_data,
                type=ATTACHMENT_TYPE,
            )
        ],
    )


def _render_row(label: str, value: str) -> str:
    return f"""
            <tr>
              <td style="{_ROW_STYLE}"><strong>{label}:</strong></td>
              <td style="{_ROW_STYLE}">{value}</td>
            </tr>"""
