"""Outgoing email.

Messages are handed to the ``send_email`` Celery task by name and never
awaited. A failure to enqueue is logged and swallowed so the calling request
still commits.
"""

from __future__ import annotations

from html import escape

import structlog

from eventhub.core.config import settings
from eventhub.models import Event, SpeakerInvitation, Ticket, User
from eventhub.worker.celery_app import celery_app

logger = structlog.get_logger()


def queue_email(to: str, subject: str, text: str, html: str | None = None) -> None:
    try:
        celery_app.send_task("send_email", args=[to, subject, text, html])
    except Exception as exc:
        logger.warning("email_enqueue_failed", to=to, subject=subject, error=str(exc))


def _event_summary(event: Event) -> str:
    return (
        f"{event.title}\n"
        f"Date: {event.date.isoformat()} {event.start_time:%H:%M}-{event.end_time:%H:%M}\n"
        f"Location: {event.location}, room {event.room_number}"
    )


def _schedule_lines(event: Event) -> list[str]:
    lines = []
    for item in event.schedule or []:
        line = f"  {item.get('time', '')}  {item.get('title', '')}"
        if item.get("description"):
            line += f" - {item['description']}"
        lines.append(line)
    return lines


def send_ticket_confirmation(user: User, event: Event, ticket: Ticket) -> None:
    text = (
        f"Hi {user.username},\n\n"
        f"Your ticket for {_event_summary(event)}\n\n"
        f"Ticket code: {ticket.ticket_code}\n"
        "Show the attached QR code at the entrance.\n"
    )
    html = (
        f"<p>Hi {escape(user.username)},</p>"
        f"<p>Your ticket for <strong>{escape(event.title)}</strong> on "
        f"{event.date.isoformat()} at {event.start_time:%H:%M}.</p>"
        f"<p>Ticket code: <code>{ticket.ticket_code}</code></p>"
        f'<p><img src="{ticket.qr_code_url}" alt="Ticket QR code"></p>'
    )
    queue_email(user.email, f"Your ticket for {event.title}", text, html)


def send_speaker_approved(user: User) -> None:
    text = (
        f"Hi {user.username},\n\n"
        "Your request to become a speaker has been approved. "
        "Organizers can now invite you to their events.\n"
    )
    queue_email(user.email, "Your speaker request was approved", text)


def send_speaker_rejected(user: User) -> None:
    text = (
        f"Hi {user.username},\n\n"
        "Unfortunately your request to become a speaker was not approved.\n"
    )
    queue_email(user.email, "Your speaker request was not approved", text)


def send_invitation_received(
    speaker: User, organizer: User, event: Event, invitation: SpeakerInvitation
) -> None:
    text = (
        f"Hi {speaker.username},\n\n"
        f"{organizer.username} invited you to speak at {_event_summary(event)}\n"
    )
    if invitation.message:
        text += f"\nMessage: {invitation.message}\n"
    text += f"\nRespond at {settings.frontend_base_url}/speaker-invitations\n"
    queue_email(speaker.email, f"Invitation to speak at {event.title}", text)


def send_invitation_accepted(speaker: User, event: Event) -> None:
    text = f"Hi {speaker.username},\n\nYou are confirmed as a speaker at {_event_summary(event)}\n"
    if event.description:
        text += f"\n{event.description}\n"
    schedule = _schedule_lines(event)
    if schedule:
        text += "\nSchedule:\n" + "\n".join(schedule) + "\n"
    queue_email(speaker.email, f"Speaker confirmation: {event.title}", text)


def send_password_reset(user: User, raw_token: str) -> None:
    link = f"{settings.frontend_base_url.rstrip('/')}/reset-password/{raw_token}"
    minutes = settings.password_reset_ttl_seconds // 60
    text = (
        f"Hi {user.username},\n\n"
        f"Reset your password here: {link}\n"
        f"The link expires in {minutes} minutes. Ignore this email if you did not ask for it.\n"
    )
    queue_email(user.email, "Reset your password", text)
