"""SMTP email service for signature confirmation mail."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from flask import current_app
from markupsafe import escape

logger = logging.getLogger(__name__)


def is_configured() -> bool:
    """Return True if all required SMTP settings are present."""
    from petitions.models import Settings

    return all(
        Settings.get(k)
        for k in ("smtp_host", "smtp_user", "smtp_from_email")
    )


def send_email(to: str, subject: str, body_html: str, body_text: str) -> None:
    """Send an email via SMTP. Raises on failure."""
    from petitions.models import Settings

    config = Settings.get_smtp_config()

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = config["from_email"]
    msg["To"] = to
    msg.attach(MIMEText(body_text, "plain"))
    msg.attach(MIMEText(body_html, "html"))

    with smtplib.SMTP(config["host"], config["port"], timeout=15) as smtp:
        if config["use_tls"]:
            smtp.starttls()
        if config["user"] and config["password"]:
            smtp.login(config["user"], config["password"])
        smtp.sendmail(config["from_email"], [to], msg.as_string())

    logger.info("Email sent to %s: %s", to, subject)


def confirmation_url(signature) -> str:
    """Return the link a signer follows to confirm *signature*."""
    base_url = current_app.config.get("BASE_URL", "").rstrip("/")
    return f"{base_url}/signatures/{signature.unique_key}/confirm"


def _send_confirmation_link(signature, subject: str, intro: str) -> None:
    if not is_configured():
        logger.warning("SMTP is not configured; not mailing %s", signature.email)
        return

    url = confirmation_url(signature)
    petition_name = signature.petition.name if signature.petition else "the petition"
    body_text = (
        f"Dear {signature.name},\n\n"
        f"{intro} {petition_name}.\n\n"
        f"Please confirm your signature by following the link below:\n\n"
        f"{url}\n\n"
        f"If you did not sign this petition, you can safely ignore this email."
    )
    body_html = f"""
<p>Dear {escape(signature.name)},</p>
<p>{intro} {escape(petition_name)}.</p>
<p>Please confirm your signature by following the link below:</p>
<p><a href="{escape(url)}">{escape(url)}</a></p>
<p>If you did not sign this petition, you can safely ignore this email.</p>
"""
    send_email(signature.email, subject, body_html, body_text)


def send_confirmation(signature) -> None:
    """Send the first confirmation request for a new signature."""
    _send_confirmation_link(
        signature,
        "Please confirm your signature",
        "Thank you for signing",
    )


def send_reminder_confirmation(signature) -> None:
    """Remind a signer that their signature is still unconfirmed."""
    _send_confirmation_link(
        signature,
        "Reminder: please confirm your signature",
        "You have not yet confirmed your signature for",
    )
