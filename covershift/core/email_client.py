# covershift/core/email_client.py
from __future__ import annotations

"""
Email client utilities for the CoverShift backend.

Responsibilities:
  - Read SMTP configuration from environment variables.
  - Provide a single send_email(...) function for services to use.
  - Render the "new booking request" email sent to teachers.
  - Support both TLS (STARTTLS) and SSL connections.

Typical .env configuration:

    SMTP_HOST=smtp.example.com
    SMTP_PORT=587
    SMTP_USERNAME=bookings@example.com
    SMTP_PASSWORD=app-password
    SMTP_FROM_EMAIL=bookings@example.com
    SMTP_FROM_NAME=CoverShift
    SMTP_USE_TLS=true
    SMTP_USE_SSL=false
"""

import html
import os
import smtplib
from datetime import date
from email.message import EmailMessage


def _get_bool_env(name: str, default: bool = False) -> bool:
    """
    Read a boolean env var.

    Accepted truthy values (case-insensitive):
      - "1", "true", "yes", "y"

    Everything else is treated as False.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y"}


# ---------------------------------------------------------------------------
# Configuration: read once at import time
# ---------------------------------------------------------------------------

SMTP_HOST: str | None = os.getenv("SMTP_HOST")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))

SMTP_USERNAME: str | None = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD")

# Fallback: if FROM_EMAIL is not set, default to username
SMTP_FROM_EMAIL: str = os.getenv("SMTP_FROM_EMAIL", SMTP_USERNAME or "")

# Human-readable sender name, shown in email clients
SMTP_FROM_NAME: str = os.getenv("SMTP_FROM_NAME", "CoverShift")

# Connection mode flags
SMTP_USE_TLS: bool = _get_bool_env("SMTP_USE_TLS", default=True)
SMTP_USE_SSL: bool = _get_bool_env("SMTP_USE_SSL", default=False)


def _create_smtp_client() -> smtplib.SMTP:
    """
    Create and return an SMTP client configured for TLS or SSL.

    Priority:
      - If SMTP_USE_SSL is True → use smtplib.SMTP_SSL (commonly port 465).
      - Else → use smtplib.SMTP + optional STARTTLS if SMTP_USE_TLS is True.
    """
    if not SMTP_HOST:
        raise RuntimeError("SMTP_HOST is not configured. Please set it in .env.")

    if SMTP_USE_SSL:
        server: smtplib.SMTP = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, timeout=30)
    else:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
        if SMTP_USE_TLS:
            server.starttls()

    return server


def email_is_configured() -> bool:
    """True when the SMTP host and credentials are all present."""
    return bool(SMTP_HOST and SMTP_USERNAME and SMTP_PASSWORD)


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> None:
    """
    Send an email to a single recipient.

    Raises
    ------
    RuntimeError:
        If required SMTP configuration is missing.
    smtplib.SMTPException:
        If the underlying SMTP connection or send fails.
    """
    if not email_is_configured():
        raise RuntimeError(
            "SMTP is not configured correctly. "
            "Please set SMTP_HOST, SMTP_USERNAME, and SMTP_PASSWORD in .env."
        )

    msg = EmailMessage()

    from_header = (
        f"{SMTP_FROM_NAME} <{SMTP_FROM_EMAIL}>"
        if SMTP_FROM_EMAIL
        else SMTP_USERNAME
    )
    msg["From"] = from_header
    msg["To"] = to_email
    msg["Subject"] = subject

    # Always add a plain-text part
    msg.set_content(text_body)

    if html_body:
        msg.add_alternative(html_body, subtype="html")

    server = _create_smtp_client()
    try:
        server.login(SMTP_USERNAME, SMTP_PASSWORD)  # type: ignore[arg-type]
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            # Connection is being torn down anyway.
            pass


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


def pretty_date_range(start: date | None, end: date | None) -> str:
    """
    Format a job's date span for humans.

      - no dates        -> ""
      - single day      -> "2025-11-03"
      - multi-day span  -> "2025-11-03 → 2025-11-05"
    """
    if start is None:
        return end.isoformat() if end is not None else ""
    if end is None or start == end:
        return start.isoformat()
    return f"{start.isoformat()} → {end.isoformat()}"


def render_job_request_email(
    school: str | None,
    start: date | None,
    end: date | None,
    review_link: str,
) -> tuple[str, str, str]:
    """
    Build (subject, text_body, html_body) for a booking request email.
    """
    school_name = school or "your school"
    date_text = pretty_date_range(start, end)

    subject = "New booking request"
    text_body = (
        "Hi there,\n\n"
        f"You've been requested for {school_name} on {date_text}.\n"
        f"Please review and respond in your account: {review_link}\n\n"
        "Thank you,\nCoverShift"
    )
    html_body = (
        "<p>Hi there,</p>"
        f"<p>You've been requested for <strong>{html.escape(school_name)}</strong> "
        f"on <strong>{html.escape(date_text)}</strong>.</p>"
        f'<p>Please <a href="{html.escape(review_link)}">review and respond</a> '
        "in your account.</p>"
        "<p>Thank you,<br/>CoverShift</p>"
    )
    return subject, text_body, html_body
