"""Tests for grade email formatting and delivery."""

import smtplib

import pytest

from ultra_eval.core.config import Settings
from ultra_eval.schemas.evaluation import CategoryScore, EvaluationResult
from ultra_eval.services import notification_service
from ultra_eval.services.notification_service import (
    EmailNotifier,
    NotificationError,
    QueuedNotifier,
    build_notifier,
    grade_email_subject,
    render_grade_email,
    send_email,
)
from ultra_eval.workers import tasks


@pytest.fixture
def evaluation():
    return EvaluationResult(
        elo_awarded=64,
        feedback="National finalist <b>with</b> strong execution.",
        category_score=CategoryScore(impact=7, productivity=6, quality=8, relevance=9),
    )


@pytest.fixture
def smtp_settings():
    return Settings(
        SMTP_HOST="smtp.example.com",
        SMTP_PORT=587,
        SMTP_USER="mailer@example.com",
        SMTP_PASSWORD="app-password",
        SENDER_EMAIL="noreply@example.com",
    )


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None, **kwargs):
        self.host = host
        self.port = port
        self.logged_in = None
        self.messages = []
        self.tls = False
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        pass

    def starttls(self, context=None):
        self.tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, msg):
        self.messages.append(msg)


class TestRenderGradeEmail:
    def test_contains_grade_and_metrics(self, evaluation):
        body = render_grade_email("Ada Lovelace", "Robotics nationals", evaluation)
        assert "Hi Ada," in body
        assert "+64" in body
        assert "Robotics nationals" in body
        for label, value in (("Impact", 7), ("Productivity", 6), ("Quality", 8), ("Relevance", 9)):
            assert label in body
            assert f"{value}/10" in body
        assert "Ultra Eval" in body

    def test_user_text_is_escaped(self, evaluation):
        body = render_grade_email("<script>x</script>", "Title & <i>more</i>", evaluation)
        assert "<script>" not in body
        assert "Title &amp; &lt;i&gt;more&lt;/i&gt;" in body
        assert "&lt;b&gt;with&lt;/b&gt;" in body

    def test_empty_name_falls_back(self, evaluation):
        assert "Hi there," in render_grade_email("", "t", evaluation)

    def test_subject(self):
        assert grade_email_subject("Science fair") == "Your report was graded: Science fair"

    def test_subject_is_single_line(self):
        subject = grade_email_subject("Science fair\r\nBcc: everyone@example.com")
        assert subject == "Your report was graded: Science fair Bcc: everyone@example.com"


class TestSendEmail:
    def test_missing_configuration_raises(self):
        with pytest.raises(NotificationError):
            send_email(Settings(SMTP_HOST=None, SMTP_USER=None, SENDER_EMAIL=None), "a@example.com", "s", "<p>x</p>")

    def test_sends_over_starttls(self, smtp_settings, monkeypatch):
        FakeSMTP.instances = []
        monkeypatch.setattr(notification_service.smtplib, "SMTP", FakeSMTP)

        send_email(smtp_settings, "ada@example.com", "Graded", "<p>hello</p>")

        server = FakeSMTP.instances[0]
        assert (server.host, server.port) == ("smtp.example.com", 587)
        assert server.tls is True
        assert server.logged_in == ("mailer@example.com", "app-password")
        msg = server.messages[0]
        assert msg["To"] == "ada@example.com"
        assert msg["From"] == "Ultra Eval <noreply@example.com>"
        assert msg["Subject"] == "Graded"

    def test_smtp_failure_becomes_notification_error(self, smtp_settings, monkeypatch):
        class RefusingSMTP(FakeSMTP):
            def send_message(self, msg):
                raise smtplib.SMTPRecipientsRefused({"ada@example.com": (550, b"no such user")})

        monkeypatch.setattr(notification_service.smtplib, "SMTP", RefusingSMTP)
        with pytest.raises(NotificationError):
            send_email(smtp_settings, "ada@example.com", "Graded", "<p>hello</p>")

    def test_bad_header_becomes_notification_error(self, smtp_settings, monkeypatch):
        FakeSMTP.instances = []
        monkeypatch.setattr(notification_service.smtplib, "SMTP", FakeSMTP)
        with pytest.raises(NotificationError):
            send_email(smtp_settings, "ada@example.com", "Graded\r\nBcc: x@example.com", "<p>hello</p>")
        assert FakeSMTP.instances == []


class TestNotifiers:
    def test_email_notifier_sends_rendered_email(self, smtp_settings, evaluation, monkeypatch):
        sent = []
        monkeypatch.setattr(
            notification_service, "send_email",
            lambda settings, to, subject, html_body: sent.append((to, subject, html_body)),
        )
        EmailNotifier(smtp_settings).notify_graded(
            to="ada@example.com", student_name="Ada Lovelace",
            report_title="Robotics nationals", evaluation=evaluation,
        )
        to, subject, body = sent[0]
        assert to == "ada@example.com"
        assert subject == "Your report was graded: Robotics nationals"
        assert "+64" in body

    def test_queued_notifier_enqueues(self, smtp_settings, evaluation, monkeypatch):
        from ultra_eval.workers import queue

        enqueued = []

        def fake_enqueue(to, subject, html_body):
            enqueued.append((to, subject))
            return "job-1"

        monkeypatch.setattr(queue, "enqueue_email_task", fake_enqueue)
        QueuedNotifier(smtp_settings).notify_graded(
            to="ada@example.com", student_name="Ada", report_title="Robotics", evaluation=evaluation,
        )
        assert enqueued == [("ada@example.com", "Your report was graded: Robotics")]

    def test_queued_notifier_wraps_queue_errors(self, smtp_settings, evaluation, monkeypatch):
        from ultra_eval.workers import queue

        def broken_enqueue(*args):
            raise ConnectionError("redis unavailable")

        monkeypatch.setattr(queue, "enqueue_email_task", broken_enqueue)
        with pytest.raises(NotificationError):
            QueuedNotifier(smtp_settings).notify_graded(
                to="ada@example.com", student_name="Ada", report_title="R", evaluation=evaluation,
            )

    def test_build_notifier_respects_flag(self):
        assert isinstance(build_notifier(Settings(NOTIFY_VIA_QUEUE=True)), QueuedNotifier)
        assert isinstance(build_notifier(Settings(NOTIFY_VIA_QUEUE=False)), EmailNotifier)


class TestSendEmailTask:
    def test_success(self, monkeypatch):
        monkeypatch.setattr(tasks, "send_email", lambda settings, to, subject, html_body: None)
        result = tasks.send_email_task("ada@example.com", "Graded", "<p>x</p>")
        assert result["status"] == "success"

    def test_failure_is_reported_not_raised(self, monkeypatch):
        def failing(settings, to, subject, html_body):
            raise NotificationError("SMTP_HOST/SENDER_EMAIL not configured")

        monkeypatch.setattr(tasks, "send_email", failing)
        result = tasks.send_email_task("ada@example.com", "Graded", "<p>x</p>")
        assert result["status"] == "error"
        assert "not configured" in result["error"]

    def test_multiline_subject_is_reported_not_raised(self, smtp_settings, monkeypatch):
        monkeypatch.setattr(tasks, "settings", smtp_settings)
        monkeypatch.setattr(notification_service.smtplib, "SMTP", FakeSMTP)
        result = tasks.send_email_task("ada@example.com", "Graded\nagain", "<p>x</p>")
        assert result["status"] == "error"


def test_enqueue_email_task_targets_notifications_queue(monkeypatch):
    from ultra_eval.workers import queue

    enqueued = []

    class FakeJob:
        id = "job-42"

    class FakeQueue:
        def __init__(self, name, connection=None):
            self.name = name

        def enqueue(self, func, *args):
            enqueued.append((self.name, func, args))
            return FakeJob()

    monkeypatch.setattr(queue, "Queue", FakeQueue)
    monkeypatch.setattr(queue, "get_redis_connection", lambda: object())

    assert queue.enqueue_email_task("ada@example.com", "Graded", "<p>x</p>") == "job-42"
    name, func, args = enqueued[0]
    assert name == "notifications"
    assert func is tasks.send_email_task
    assert args == ("ada@example.com", "Graded", "<p>x</p>")
