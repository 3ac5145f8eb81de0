from __future__ import annotations

import base64
from io import BytesIO
from typing import Any

import qrcode


def build_ticket_payload(ticket_code: str, event_id: Any, user_id: Any, paid: bool = False) -> str:
    lines = [
        f"Ticket code: {ticket_code}",
        f"Event ID: {event_id}",
        f"User ID: {user_id}",
    ]
    if paid:
        lines.append("Paid: yes")
    return "\n".join(lines)


def render_data_url(payload: str) -> str:
    """Encode ``payload`` as a QR image and return it as a PNG data URL."""
    image = qrcode.make(payload)
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def ticket_qr_code(ticket_code: str, event_id: Any, user_id: Any, paid: bool = False) -> str:
    return render_data_url(build_ticket_payload(ticket_code, event_id, user_id, paid=paid))
