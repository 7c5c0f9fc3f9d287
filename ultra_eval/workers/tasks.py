"""
Notification Tasks for Worker
These tasks are executed by RQ workers to deliver emails off the request path
"""

import logging

from ultra_eval.core.config import settings
from ultra_eval.services.notification_service import NotificationError, send_email

logger = logging.getLogger(__name__)


def send_email_task(to: str, subject: str, html_body: str) -> dict:
    """
    Worker task to send one email.

    Delivery is best-effort: failures are logged and reported in the
    returned dict, never re-raised, so RQ does not mark the job for retry.

    Returns:
        Dictionary with the delivery outcome
    """
    try:
        logger.info(f"Sending email '{subject}' to {to}")
        send_email(settings, to, subject, html_body)
        return {
            "status": "success",
            "to": to,
            "message": f"Sent '{subject}'",
        }

    except NotificationError as e:
        logger.error(f"Email delivery to {to} failed: {e}")
        return {
            "status": "error",
            "to": to,
            "error": str(e),
            "message": "Email delivery failed",
        }
