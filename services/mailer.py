"""Transactional e-mail over SMTP.

Every sender returns an :class:`Outcome`; nothing here raises into the
request that triggered the e-mail.
"""

from __future__ import annotations

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from flask import current_app, render_template

from services.outcome import Outcome

logger = logging.getLogger(__name__)

VISA_TYPE_LABELS = {
    "VITEM_III": "VITEM III (Humanitarian)",
    "VITEM_XI": "VITEM XI (Family Reunion)",
}


def _send(to: str, subject: str, html_content: str) -> Outcome:
    config = current_app.config
    host = config.get("SMTP_HOST")
    if not host:
        logger.info("SMTP not configured; skipped %r to %s", subject, to)
        return Outcome.skipped("smtp not configured")

    port = int(config.get("SMTP_PORT") or 587)
    from_address = config.get("MAIL_FROM")

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = to
    msg.attach(MIMEText(html_content, "html"))

    try:
        context = ssl.create_default_context()
        use_ssl = config.get("SMTP_USE_SSL") or port == 465
        if use_ssl:
            connection = smtplib.SMTP_SSL(host, port, context=context, timeout=30)
        else:
            connection = smtplib.SMTP(host, port, timeout=30)
        with connection as server:
            if not use_ssl:
                server.starttls(context=context)
            if config.get("SMTP_USERNAME"):
                server.login(config["SMTP_USERNAME"], config.get("SMTP_PASSWORD") or "")
            server.sendmail(from_address, [to], msg.as_string())
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("SMTP send of %r to %s failed: %s", subject, to, exc)
        return Outcome.skipped(str(exc))

    logger.info("Sent %r to %s", subject, to)
    return Outcome.ok(to)


def send_verification_email(to: str, token: str, full_name: str) -> Outcome:
    link = f"{current_app.config['FRONTEND_URL'].rstrip('/')}/verify-email/{token}"
    html = render_template("emails/verify.html", full_name=full_name, link=link)
    return _send(to, "Verify your e-mail address", html)


def send_welcome_email(to: str, full_name: str) -> Outcome:
    html = render_template(
        "emails/welcome.html",
        full_name=full_name,
        dashboard_url=current_app.config["FRONTEND_URL"],
    )
    return _send(to, "Welcome to the visa application portal", html)


def send_application_approved_email(
    to: str, full_name: str, application_id: str, visa_type: str
) -> Outcome:
    html = render_template(
        "emails/application_decision.html",
        full_name=full_name,
        application_id=application_id,
        visa_label=VISA_TYPE_LABELS.get(visa_type, visa_type),
        approved=True,
        reason=None,
    )
    return _send(to, "Your visa application has been approved", html)


def send_application_rejected_email(
    to: str,
    full_name: str,
    application_id: str,
    visa_type: str,
    reason: str | None = None,
) -> Outcome:
    html = render_template(
        "emails/application_decision.html",
        full_name=full_name,
        application_id=application_id,
        visa_label=VISA_TYPE_LABELS.get(visa_type, visa_type),
        approved=False,
        reason=reason,
    )
    return _send(to, "Update on your visa application", html)
