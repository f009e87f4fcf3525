"""
Email Service using SMTP (when configured) or Resend
Templates are written in MJML and compiled to HTML before sending
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union

import resend
from mjml import mjml_to_html
from starlette.concurrency import run_in_threadpool

from .config import (
    DEV_SUPPORT_EMAIL,
    EMAIL_FROM_ADDRESS,
    RESEND_API_KEY,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_SSL,
    SMTP_USER,
)
from .email_templates import (
    appointment_confirmation_template,
    appointment_reminder_template,
    payment_reminder_template,
    support_reply_template,
    support_ticket_template,
    welcome_email_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailNotConfiguredError(Exception):
    """Raised when neither SMTP nor Resend is configured"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise
    if isinstance(result, dict):
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    # Newer mjml releases return an object with .html / .errors
    errors = getattr(result, "errors", None)
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    return getattr(result, "html", str(result))


def send_via_smtp(to: list[str], subject: str, html_content: str, from_address: str) -> dict:
    """Send through the configured SMTP server (blocking)"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(to)
    msg.attach(MIMEText(html_content, "html", "utf-8"))

    context = ssl.create_default_context()
    if SMTP_USE_SSL:
        server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
    else:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
        server.starttls(context=context)
    try:
        if SMTP_USER and SMTP_PASSWORD:
            server.login(SMTP_USER, SMTP_PASSWORD)
        server.sendmail(from_address, to, msg.as_string())
    finally:
        server.quit()

    logger.info(f"✅ Email sent via SMTP to {to}")
    return {"provider": "smtp", "to": to}


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using SMTP (if configured) or Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address
    """
    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if SMTP_HOST:
        try:
            logger.info(f"📧 Sending email via SMTP: {SMTP_HOST}")
            return await run_in_threadpool(send_via_smtp, recipients, subject, html_content, sender)
        except Exception as e:
            logger.warning(f"⚠️ SMTP failed, falling back to Resend: {e}")

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing and no SMTP")
        raise EmailNotConfiguredError("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {"from": sender, "to": recipients, "subject": subject, "html": html_content}
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise


# ============================================
# Pre-built emails
# ============================================


async def send_welcome_email(to: str, user_name: str) -> dict:
    return await send_email(
        to=to,
        subject="Bem-vindo ao ViraWeb!",
        mjml_content=welcome_email_template(user_name),
    )


async def send_appointment_confirmation(
    to: str,
    patient_name: str,
    professional_name: Optional[str],
    appointment_date: str,
    appointment_time: str,
    clinic_name: Optional[str] = None,
) -> dict:
    return await send_email(
        to=to,
        subject="Confirmação de Agendamento - ViraWeb",
        mjml_content=appointment_confirmation_template(
            patient_name, professional_name, appointment_date, appointment_time, clinic_name
        ),
    )


async def send_appointment_reminder(
    to: str,
    patient_name: str,
    professional_name: Optional[str],
    appointment_date: str,
    appointment_time: str,
) -> dict:
    return await send_email(
        to=to,
        subject="Lembrete: Consulta Amanhã - ViraWeb",
        mjml_content=appointment_reminder_template(
            patient_name, professional_name, appointment_date, appointment_time
        ),
    )


async def send_payment_reminder(to: str, patient_name: str, due_date: Optional[str]) -> dict:
    return await send_email(
        to=to,
        subject="Lembrete de Pagamento - ViraWeb",
        mjml_content=payment_reminder_template(patient_name, due_date),
    )


async def notify_support_new_ticket(
    ticket_id: int, subject: str, message: str, user_email: str, priority: str
) -> Optional[dict]:
    """Email the support inbox about a new ticket (skipped when DEV_SUPPORT_EMAIL is unset)"""
    if not DEV_SUPPORT_EMAIL:
        logger.warning("⚠️ DEV_SUPPORT_EMAIL not set, skipping support notification")
        return None
    return await send_email(
        to=DEV_SUPPORT_EMAIL,
        subject=f"[Suporte #{ticket_id}] {subject}",
        mjml_content=support_ticket_template(ticket_id, subject, message, user_email, priority),
    )


async def notify_support_reply(
    ticket_id: int, subject: str, message: str, user_email: str
) -> Optional[dict]:
    if not DEV_SUPPORT_EMAIL:
        logger.warning("⚠️ DEV_SUPPORT_EMAIL not set, skipping support notification")
        return None
    return await send_email(
        to=DEV_SUPPORT_EMAIL,
        subject=f"Re: [Suporte #{ticket_id}] {subject}",
        mjml_content=support_reply_template(ticket_id, subject, message, user_email),
    )


async def send_quietly(send_func, *args, **kwargs) -> Optional[dict]:
    """Run a sender from a background task; delivery failures are logged, not raised"""
    try:
        return await send_func(*args, **kwargs)
    except Exception as e:
        logger.error(f"❌ Background email failed ({send_func.__name__}): {e}")
        return None
