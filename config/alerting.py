"""
Operational alerts for the back-office batch jobs.

The duplicate merge and the touchpoint backfill call send_alert() when a
single item fails and the batch carries on. Alerts always reach the log.
They are also posted to Slack when ALERT_SLACK_WEBHOOK_URL is set, and
critical ones are emailed to ALERT_EMAIL (or ADMIN_NOTIFICATION_EMAIL).
"""
import logging
from smtplib import SMTPException

import requests
from django.conf import settings
from django.core.mail import send_mail

from config.logging_filters import get_correlation_id

logger = logging.getLogger("alerting")

LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "warning": logging.WARNING,
    "info": logging.INFO,
}

SLACK_ICONS = {
    "critical": ":red_circle:",
    "warning": ":warning:",
    "info": ":information_source:",
}


def send_alert(severity: str, title: str, detail: str = "") -> bool:
    """
    Log an alert and forward it to the configured channels.

    Args:
        severity: "critical", "warning" or "info"
        title: Short alert title, e.g. "Prospect merge failed"
        detail: Context such as the email group or touchpoint id

    Returns:
        True when every configured channel accepted the alert
    """
    if severity not in LOG_LEVELS:
        raise ValueError(f"Unknown alert severity: {severity!r}")

    cid = get_correlation_id()
    logger.log(LOG_LEVELS[severity], f"ALERT [{severity.upper()}]: {title} -- {detail}")

    delivered = True
    webhook = getattr(settings, "ALERT_SLACK_WEBHOOK_URL", "")
    if webhook:
        delivered = _post_to_slack(webhook, severity, title, detail, cid) and delivered

    if severity == "critical":
        recipient = getattr(settings, "ALERT_EMAIL", "") or getattr(settings, "ADMIN_NOTIFICATION_EMAIL", "")
        if recipient:
            delivered = _email_alert(recipient, title, detail, cid) and delivered

    return delivered


def _post_to_slack(webhook, severity, title, detail, cid):
    text = f"{SLACK_ICONS[severity]} *{title}*\n{detail}\n_correlation id: {cid}_"
    try:
        response = requests.post(webhook, json={"text": text}, timeout=5)
        response.raise_for_status()
    except requests.RequestException:
        logger.exception("Failed to send Slack alert")
        return False
    return True


def _email_alert(recipient, title, detail, cid):
    name = settings.EPROFOS_CONFIG["organisation_name"]
    try:
        send_mail(
            subject=f"[{name} CRITICAL] {title}",
            message=f"{detail or title}\n\nCorrelation id: {cid}",
            from_email=None,
            recipient_list=[recipient],
        )
    except (SMTPException, OSError):
        logger.exception(f"Failed to email alert to {recipient}")
        return False
    return True
