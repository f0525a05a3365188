"""Reminders for signatures that were never confirmed."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from petitions import db
from petitions.errors import PersistenceFailure, SignatureValidationError
from petitions.models import Settings, Signature
from petitions.services import email as email_service
from petitions.services.signatures import commit_signature, dispatch_mail
from petitions.services.validation import UPDATE, SignatureValidator

logger = logging.getLogger(__name__)


class ReminderCoordinator:
    """Sends confirmation reminders and clears out stale duplicates."""

    def __init__(self, mailer=None, validator=None):
        self.mailer = mailer or email_service
        self.validator = validator or SignatureValidator()

    def send_reminder(self, signature: Signature, now=None) -> bool:
        """Remind the signer of *signature* to confirm.

        When another signature with the same email exists on the same
        petition, *signature* is a stale duplicate and is deleted instead.
        A signature that cannot be saved is deleted as well. Returns True
        only when a reminder was dispatched.
        """
        signature.last_reminder_sent_at = now or datetime.utcnow()
        signature.reminders_sent = (signature.reminders_sent or 0) + 1

        with db.session.no_autoflush:
            duplicate = Signature.find_duplicate(
                signature.email, signature.petition_id, exclude_id=signature.id
            )
        if duplicate is not None:
            logger.debug("Discarding duplicate signature %s for %s", signature.id, signature.email)
            self.discard(signature)
            return False

        try:
            violations = self.validator.validate(signature, UPDATE)
            if violations:
                raise SignatureValidationError(violations)
            commit_signature(signature)
        except (SignatureValidationError, PersistenceFailure):
            logger.debug(
                "Could not save reminder for %s on petition %s", signature.email, signature.petition_id
            )
            self.discard(signature)
            return False

        return dispatch_mail(self.mailer.send_reminder_confirmation, signature)

    def discard(self, signature: Signature) -> None:
        """Delete *signature*, dropping any unsaved changes first."""
        db.session.rollback()
        try:
            db.session.delete(signature)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Could not discard signature %s", signature.id)

    def due_signatures(self, now=None) -> list[Signature]:
        """Unconfirmed signatures waiting long enough for their next reminder."""
        config = Settings.get_reminder_config()
        now = now or datetime.utcnow()
        cutoff = now - timedelta(days=config["after_days"])

        return (
            Signature.query.filter(
                Signature.confirmed.is_(False),
                Signature.petition_id != 0,
                Signature.signed_at <= cutoff,
                or_(
                    Signature.reminders_sent.is_(None),
                    Signature.reminders_sent < config["max_reminders"],
                ),
                or_(
                    Signature.last_reminder_sent_at.is_(None),
                    Signature.last_reminder_sent_at <= cutoff,
                ),
            )
            .order_by(Signature.id)
            .all()
        )

    def run_sweep(self, now=None) -> dict:
        """Send a reminder to every due signature."""
        sent = discarded = 0
        for signature in self.due_signatures(now):
            signature_id = signature.id
            if self.send_reminder(signature, now=now):
                sent += 1
            elif db.session.get(Signature, signature_id) is None:
                discarded += 1

        logger.info("Reminder sweep finished: %d sent, %d discarded", sent, discarded)
        return {"sent": sent, "discarded": discarded}
