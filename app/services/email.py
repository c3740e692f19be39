import asyncio
import logging
import smtplib
from email.message import EmailMessage

from app.config import settings

logger = logging.getLogger("devconnect.email")


class EmailDeliveryError(Exception):
    pass


def is_configured() -> bool:
    return bool(settings.EMAIL_HOST and settings.EMAIL_USER)


def build_reset_url(token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/auth/reset-password?token={token}"


def _build_reset_message(email: str, reset_url: str) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = "Password Reset Request - DevConnect"
    message["From"] = f'"DevConnect" <{settings.EMAIL_USER}>'
    message["To"] = email
    message.set_content(
        "You requested a password reset for your DevConnect account.\n"
        f"Open the link below to reset your password:\n{reset_url}\n\n"
        "This link will expire in 1 hour.\n"
        "If you didn't request this, please ignore this email."
    )
    message.add_alternative(
        f"""
        <h1>Password Reset Request</h1>
        <p>You requested a password reset for your DevConnect account.</p>
        <p>Click the link below to reset your password:</p>
        <a href="{reset_url}">Reset Password</a>
        <p>This link will expire in 1 hour.</p>
        <p>If you didn't request this, please ignore this email.</p>
        """,
        subtype="html",
    )
    return message


def _send(message: EmailMessage) -> None:
    if settings.EMAIL_SECURE:
        with smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=10) as smtp:
            smtp.login(settings.EMAIL_USER, settings.EMAIL_PASSWORD)
            smtp.send_message(message)
        return
    with smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=10) as smtp:
        smtp.starttls()
        smtp.login(settings.EMAIL_USER, settings.EMAIL_PASSWORD)
        smtp.send_message(message)


async def send_password_reset_email(email: str, reset_token: str) -> None:
    reset_url = build_reset_url(reset_token)
    if not is_configured():
        # dev mode: without SMTP the link only goes to the log
        logger.info("Email not configured, password reset link for %s: %s", email, reset_url)
        return
    message = _build_reset_message(email, reset_url)
    try:
        await asyncio.to_thread(_send, message)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Error sending password reset email: %s", exc)
        raise EmailDeliveryError("Failed to send password reset email") from exc
