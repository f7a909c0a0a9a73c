"""Tests for SMTP delivery of transactional e-mail."""

from __future__ import annotations

import smtplib

import pytest

from services import mailer


class FakeSMTP:
    """Stand-in SMTP connection recording what the mailer does with it."""

    instances: list["FakeSMTP"] = []
    fail_starttls = False

    def __init__(self, host, port, timeout=None, **kwargs):
        self.host = host
        self.port = port
        self.sent: list[tuple] = []
        self.logged_in = None
        self.closed = False
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def starttls(self, context=None):
        if FakeSMTP.fail_starttls:
            raise smtplib.SMTPNotSupportedError("STARTTLS extension not supported by server.")

    def login(self, username, password):
        self.logged_in = (username, password)

    def sendmail(self, from_address, to_addresses, body):
        self.sent.append((from_address, to_addresses, body))


@pytest.fixture()
def smtp(app, monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_starttls = False
    monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setitem(app.config, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setitem(app.config, "SMTP_PORT", 587)
    monkeypatch.setitem(app.config, "SMTP_USERNAME", "mailer")
    monkeypatch.setitem(app.config, "SMTP_PASSWORD", "hunter2")
    return FakeSMTP


def test_send_skipped_without_smtp_host(app):
    with app.app_context():
        outcome = mailer.send_welcome_email("jane@example.com", "JANE APPLICANT")

    assert outcome.delivered is False
    assert outcome.reason == "smtp not configured"


def test_send_delivers_and_closes_connection(app, smtp):
    with app.app_context():
        outcome = mailer.send_welcome_email("jane@example.com", "JANE APPLICANT")

    assert outcome.delivered is True
    connection = smtp.instances[0]
    assert connection.logged_in == ("mailer", "hunter2")
    assert connection.sent[0][1] == ["jane@example.com"]
    assert connection.closed is True


def test_failed_starttls_closes_connection(app, smtp):
    smtp.fail_starttls = True

    with app.app_context():
        outcome = mailer.send_welcome_email("jane@example.com", "JANE APPLICANT")

    assert outcome.delivered is False
    assert "STARTTLS" in outcome.reason
    connection = smtp.instances[0]
    assert connection.sent == []
    assert connection.closed is True
