from unittest.mock import patch

from apscheduler.triggers.cron import CronTrigger

from petitions.models import Settings
from petitions.services import email as email_service
from petitions.services.scheduler import make_trigger


def configure_smtp():
    Settings.set("smtp_host", "smtp.example.com")
    Settings.set("smtp_user", "mailer")
    Settings.set("smtp_password", "secret")
    Settings.set("smtp_from_email", "petitions@example.com")


class TestMailer:
    def test_confirmation_url(self, petition, make_signature):
        signature = make_signature(petition)

        url = email_service.confirmation_url(signature)

        assert url == f"https://petitions.example/signatures/{signature.unique_key}/confirm"

    def test_not_configured_sends_nothing(self, petition, make_signature):
        signature = make_signature(petition)

        with patch("petitions.services.email.smtplib.SMTP") as smtp:
            email_service.send_confirmation(signature)

        smtp.assert_not_called()

    def test_confirmation_is_sent_to_signer(self, petition, make_signature):
        configure_smtp()
        signature = make_signature(petition, email="jane@example.com")

        with patch("petitions.services.email.smtplib.SMTP") as smtp:
            email_service.send_confirmation(signature)

        connection = smtp.return_value.__enter__.return_value
        connection.starttls.assert_called_once()
        connection.login.assert_called_once_with("mailer", "secret")
        from_email, recipients, message = connection.sendmail.call_args[0]
        assert from_email == "petitions@example.com"
        assert recipients == ["jane@example.com"]
        assert signature.unique_key in message

    def test_reminder_has_its_own_subject(self, petition, make_signature):
        configure_smtp()
        signature = make_signature(petition)

        with patch("petitions.services.email.send_email") as send_email:
            email_service.send_reminder_confirmation(signature)

        assert send_email.call_args[0][1].startswith("Reminder")

    def test_signer_supplied_markup_is_escaped(self, make_petition, make_signature):
        configure_smtp()
        petition = make_petition("Save <b>the</b> park")
        name = 'Jane <a href="http://evil.example">click</a>'
        signature = make_signature(petition, name=name)

        with patch("petitions.services.email.send_email") as send_email:
            email_service.send_confirmation(signature)

        to, subject, body_html, body_text = send_email.call_args[0]
        assert "<a href=\"http://evil.example\">" not in body_html
        assert "&lt;a href=&#34;http://evil.example&#34;&gt;click&lt;/a&gt;" in body_html
        assert "Save &lt;b&gt;the&lt;/b&gt; park" in body_html
        assert f'<a href="{email_service.confirmation_url(signature)}">' in body_html
        assert name in body_text


class TestReminderSchedule:
    def test_known_schedules(self):
        for schedule in ("hourly", "daily", "weekly"):
            assert isinstance(make_trigger(schedule), CronTrigger)

    def test_empty_schedule_disables_the_sweep(self):
        assert make_trigger("") is None
        assert make_trigger("monthly") is None

    def test_default_reminder_config(self, app):
        assert Settings.get_reminder_config() == {
            "after_days": 7,
            "max_reminders": 1,
            "schedule": "daily",
        }
