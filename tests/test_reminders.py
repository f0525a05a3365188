import smtplib
from datetime import datetime, timedelta

import pytest

from petitions import db
from petitions.models import Settings, Signature
from petitions.services.reminders import ReminderCoordinator

NOW = datetime(2026, 10, 17, 9, 0, 0)


@pytest.fixture
def coordinator(app, mailer):
    return ReminderCoordinator(mailer=mailer)


class TestSendReminder:
    def test_first_reminder(self, coordinator, petition, make_signature, mailer):
        signature = make_signature(petition)

        assert coordinator.send_reminder(signature, now=NOW) is True

        assert signature.reminders_sent == 1
        assert signature.last_reminder_sent_at == NOW
        mailer.send_reminder_confirmation.assert_called_once_with(signature)

    def test_reminders_accumulate(self, coordinator, petition, make_signature):
        signature = make_signature(petition)

        coordinator.send_reminder(signature, now=NOW)
        coordinator.send_reminder(signature, now=NOW + timedelta(days=7))

        assert signature.reminders_sent == 2
        assert signature.last_reminder_sent_at == NOW + timedelta(days=7)

    def test_duplicate_is_deleted_without_reminder(
        self, coordinator, petition, make_signature, mailer
    ):
        stale = make_signature(petition, email="x@example.com")
        kept = make_signature(
            petition, email="X@Example.com", confirmed=True, confirmed_at=NOW
        )
        stale_id, kept_id = stale.id, kept.id

        assert coordinator.send_reminder(stale, now=NOW) is False

        assert db.session.get(Signature, stale_id) is None
        assert db.session.get(Signature, kept_id) is not None
        mailer.send_reminder_confirmation.assert_not_called()

    def test_unsaveable_signature_is_discarded(
        self, coordinator, make_petition, make_signature, mailer
    ):
        petition = make_petition(require_signature_full_address=True)
        signature = make_signature(petition)
        signature_id = signature.id

        assert coordinator.send_reminder(signature, now=NOW) is False

        assert db.session.get(Signature, signature_id) is None
        mailer.send_reminder_confirmation.assert_not_called()

    def test_mail_failure_keeps_the_reminder_state(
        self, coordinator, petition, make_signature, mailer
    ):
        mailer.send_reminder_confirmation.side_effect = smtplib.SMTPException("down")
        signature = make_signature(petition)

        assert coordinator.send_reminder(signature, now=NOW) is False

        assert db.session.get(Signature, signature.id).reminders_sent == 1


class TestSweep:
    def test_due_signatures(self, coordinator, make_petition, make_signature):
        petition = make_petition()
        other = make_petition("Other")
        due = make_signature(petition, email="due@example.com", signed_at=NOW - timedelta(days=8))
        make_signature(petition, email="fresh@example.com", signed_at=NOW - timedelta(days=2))
        make_signature(
            petition,
            email="done@example.com",
            signed_at=NOW - timedelta(days=8),
            confirmed=True,
            confirmed_at=NOW,
        )
        make_signature(
            other,
            email="reminded@example.com",
            signed_at=NOW - timedelta(days=30),
            reminders_sent=1,
            last_reminder_sent_at=NOW - timedelta(days=20),
        )

        assert coordinator.due_signatures(now=NOW) == [due]

    def test_max_reminders_setting(self, coordinator, petition, make_signature):
        Settings.set("max_reminders", "2")
        signature = make_signature(
            petition,
            signed_at=NOW - timedelta(days=30),
            reminders_sent=1,
            last_reminder_sent_at=NOW - timedelta(days=20),
        )

        assert coordinator.due_signatures(now=NOW) == [signature]

    def test_recently_reminded_is_not_due(self, coordinator, petition, make_signature):
        Settings.set("max_reminders", "3")
        make_signature(
            petition,
            signed_at=NOW - timedelta(days=30),
            reminders_sent=1,
            last_reminder_sent_at=NOW - timedelta(days=1),
        )

        assert coordinator.due_signatures(now=NOW) == []

    def test_run_sweep_counts(self, coordinator, make_petition, make_signature, mailer):
        petition = make_petition()
        strict = make_petition("Strict", require_signature_full_address=True)
        make_signature(petition, email="a@example.com", signed_at=NOW - timedelta(days=8))
        make_signature(strict, email="b@example.com", signed_at=NOW - timedelta(days=8))

        result = coordinator.run_sweep(now=NOW)

        assert result == {"sent": 1, "discarded": 1}
        assert mailer.send_reminder_confirmation.call_count == 1
        assert Signature.query.count() == 1
