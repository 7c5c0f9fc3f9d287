"""
Notification Service
Formats the grade email for a student and delivers it over SMTP, either
inline or through the RQ notifications queue.
"""

import html
import logging
import smtplib
import ssl
from email.message import EmailMessage

from ultra_eval.core.config import Settings
from ultra_eval.schemas.evaluation import EvaluationResult

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    pass


def grade_email_subject(report_title: str) -> str:
    # header values cannot carry line breaks
    return f"Your report was graded: {' '.join(report_title.split())}"


def _metric(label: str, value: int) -> str:
    return (
        '<td style="width: 50%; padding: 6px;">'
        '<div style="background-color: #fafafa; border: 1px solid #f4f4f5; '
        'border-radius: 12px; padding: 16px;">'
        '<div style="font-size: 10px; font-weight: 700; text-transform: uppercase; '
        f'color: #a1a1aa; margin-bottom: 4px;">{label}</div>'
        '<div style="font-size: 16px; font-weight: 700; color: #18181b;">'
        f"{value}/10</div>"
        "</div></td>"
    )


def render_grade_email(
    student_name: str,
    report_title: str,
    evaluation: EvaluationResult,
) -> str:
    """
    Render the HTML body of the grade email.

    The student is greeted by first name; the title and model feedback are
    escaped before being embedded.
    """
    first_name = (student_name or "").strip().split(" ")[0] or "there"
    scores = evaluation.category_score

    return f"""<!DOCTYPE html>
<html>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #ffffff; color: #000000; margin: 0; padding: 0;">
  <div style="max-width: 600px; margin: 20px auto; padding: 40px;">
    <p style="font-size: 16px; font-weight: 500; margin-bottom: 24px;">Hi {html.escape(first_name)},</p>

    <div style="background-color: #f4f4f5; border-radius: 16px; padding: 32px; margin-bottom: 32px;">
      <div style="font-size: 12px; font-weight: 700; text-transform: uppercase; color: #71717a; margin-bottom: 8px;">ELO Awarded</div>
      <div style="font-size: 48px; font-weight: 800; color: #000000;">+{evaluation.elo_awarded}</div>
      <div style="font-size: 18px; font-weight: 600; color: #18181b; margin-top: 4px;">{html.escape(report_title)}</div>
    </div>

    <div style="font-size: 12px; font-weight: 700; text-transform: uppercase; color: #71717a; margin-bottom: 8px;">Analysis</div>
    <div style="font-size: 15px; line-height: 1.6; color: #3f3f46; margin-bottom: 32px; border-left: 2px solid #e4e4e7; padding-left: 20px;">
      {html.escape(evaluation.feedback)}
    </div>

    <div style="font-size: 12px; font-weight: 700; text-transform: uppercase; color: #71717a; margin-bottom: 8px;">Metrics Breakdown</div>
    <table style="width: 100%; border-collapse: collapse; margin-bottom: 32px;">
      <tr>{_metric("Impact", scores.impact)}{_metric("Quality", scores.quality)}</tr>
      <tr>{_metric("Productivity", scores.productivity)}{_metric("Relevance", scores.relevance)}</tr>
    </table>

    <div style="margin-top: 60px; padding-top: 24px; border-top: 1px solid #f4f4f5; font-size: 13px; color: #a1a1aa;">
      Ultra Eval
    </div>
  </div>
</body>
</html>"""


def send_email(settings: Settings, to: str, subject: str, html_body: str) -> None:
    """Send one HTML email over SMTP. Raises NotificationError on any failure."""
    sender = settings.SENDER_EMAIL or settings.SMTP_USER
    if not settings.SMTP_HOST or not sender:
        raise NotificationError("SMTP_HOST/SENDER_EMAIL not configured")
    if not to:
        raise NotificationError("recipient address is empty")

    msg = EmailMessage()
    try:
        msg["From"] = f"{settings.SENDER_NAME} <{sender}>"
        msg["To"] = to
        msg["Subject"] = subject
    except ValueError as e:
        raise NotificationError(f"invalid email header: {e}") from e
    msg.set_content("Your report was graded. Open this email in an HTML-capable client to see the details.")
    msg.add_alternative(html_body, subtype="html")

    try:
        if settings.SMTP_PORT == 465:
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, context=context, timeout=30) as s:
                if settings.SMTP_USER and settings.SMTP_PASSWORD:
                    s.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                s.send_message(msg)
        else:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as s:
                s.ehlo()
                s.starttls(context=ssl.create_default_context())
                s.ehlo()
                if settings.SMTP_USER and settings.SMTP_PASSWORD:
                    s.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                s.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        raise NotificationError(f"failed to send email to {to}: {e}") from e

    logger.info(f"Sent email '{subject}' to {to}")


class EmailNotifier:
    """Sends the grade email inside the request."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def notify_graded(self, *, to: str, student_name: str, report_title: str,
                      evaluation: EvaluationResult) -> None:
        send_email(
            self.settings,
            to,
            grade_email_subject(report_title),
            render_grade_email(student_name, report_title, evaluation),
        )


class QueuedNotifier:
    """Hands the grade email to an RQ worker."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def notify_graded(self, *, to: str, student_name: str, report_title: str,
                      evaluation: EvaluationResult) -> None:
        from ultra_eval.workers.queue import enqueue_email_task

        try:
            job_id = enqueue_email_task(
                to,
                grade_email_subject(report_title),
                render_grade_email(student_name, report_title, evaluation),
            )
        except Exception as e:
            raise NotificationError(f"failed to enqueue email to {to}: {e}") from e
        logger.info(f"Queued grade email to {to} as job {job_id}")


def build_notifier(settings: Settings):
    if settings.NOTIFY_VIA_QUEUE:
        return QueuedNotifier(settings)
    return EmailNotifier(settings)
