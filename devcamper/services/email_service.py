from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Any

from devcamper.core.config import Settings


class EmailDeliveryError(Exception):
    pass


logger = logging.getLogger("devcamper.email")


def _normalize_email(value: str | None) -> str:
    return str(value or "").strip().lower()


def _mock_send(*, email: str, subject: str, body: str) -> dict[str, Any]:
    logger.warning("[EMAIL MOCK] to=%s subject=%s body=%s", email, subject, body)
    return {"provider": "mock_email", "status": "accepted", "sent": False, "mocked": True}


def _send_smtp(settings: Settings, *, email: str, subject: str, body: str) -> dict[str, Any]:
    host = str(settings.SMTP_HOST or "").strip()
    port = int(settings.SMTP_PORT or 0)
    username = str(settings.SMTP_USER or "").strip()
    password = str(settings.SMTP_PASSWORD or "").strip()
    sender = str(settings.SMTP_FROM or "").strip()

    if not host or not port or not sender:
        raise EmailDeliveryError("SMTP_HOST/SMTP_PORT/SMTP_FROM are not configured")

    msg = EmailMessage()
    msg["From"] = f"{settings.EMAIL_FROM_NAME} <{sender}>" if settings.EMAIL_FROM_NAME else sender
    msg["To"] = email
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(host=host, port=port, timeout=15) as client:
            client.ehlo()
            if settings.SMTP_USE_TLS:
                client.starttls()
                client.ehlo()
            if username:
                client.login(username, password)
            client.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        raise EmailDeliveryError(f"SMTP delivery failed: {exc}") from exc

    return {"provider": "smtp", "status": "accepted", "sent": True}


def send_email(settings: Settings, *, email: str, subject: str, body: str) -> dict[str, Any]:
    normalized_email = _normalize_email(email)
    if not normalized_email:
        raise EmailDeliveryError("Invalid email")

    provider = str(settings.EMAIL_PROVIDER or "dummy").strip().lower()
    if provider in {"", "dummy", "mock", "console"}:
        return _mock_send(email=normalized_email, subject=subject, body=body)
    if provider == "smtp":
        return _send_smtp(settings, email=normalized_email, subject=subject, body=body)
    raise EmailDeliveryError(f"Unknown EMAIL_PROVIDER: {provider}")
