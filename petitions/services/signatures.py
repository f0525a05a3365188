"""Signature lifecycle: create, profile update and confirmation.

Every operation persists the record first. Counter updates and mail are
dispatched only after the commit and their failures are logged, never
raised to the caller.
"""

import logging
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from petitions import db
from petitions.errors import (
    DuplicateSignatureError,
    PersistenceFailure,
    SignatureNotFoundError,
    SignatureValidationError,
)
from petitions.models import Signature, generate_unique_key
from petitions.services import email as email_service
from petitions.services.counters import CounterAggregator
from petitions.services.validation import CREATE, UPDATE, SignatureValidator

logger = logging.getLogger(__name__)


def dispatch_mail(send, signature) -> bool:
    """Call the mailer function *send* for *signature*; failures are logged."""
    try:
        send(signature)
    except Exception:
        logger.exception("Mailing signature %s to %s failed", signature.id, signature.email)
        return False
    return True


# Constraint names (PostgreSQL) and column lists (SQLite) of the unique indexes
_DUPLICATE_MARKERS = (
    "uq_signatures_email_petition",
    "ix_signatures_unique_key",
    "signatures.email, signatures.petition_id",
    "signatures.unique_key",
)


def is_duplicate_violation(exc: IntegrityError) -> bool:
    """Return True when *exc* was raised by a signature uniqueness constraint."""
    message = str(exc.orig).lower()
    return any(marker in message for marker in _DUPLICATE_MARKERS)


def commit_signature(signature) -> None:
    """Commit the session holding *signature*, rolling back on failure.

    Only uniqueness violations become a DuplicateSignatureError; any other
    integrity failure (foreign key, NOT NULL) is a PersistenceFailure.
    """
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        if not is_duplicate_violation(exc):
            logger.error("Saving signature for %s failed: %s", signature.email, exc.orig)
            raise PersistenceFailure(str(exc.orig)) from exc
        logger.info("Duplicate signature for %s on petition %s", signature.email, signature.petition_id)
        raise DuplicateSignatureError() from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceFailure(str(exc)) from exc


class SignatureService:
    """Entry point the web layer uses for the signature lifecycle."""

    def __init__(self, counters=None, mailer=None, validator=None):
        self._counters = counters
        self.mailer = mailer or email_service
        self.validator = validator or SignatureValidator()

    @property
    def counters(self):
        if self._counters is None:
            self._counters = current_app.extensions["counter_store"]
        return self._counters

    @property
    def aggregator(self) -> CounterAggregator:
        return CounterAggregator(self.counters)

    def validate(self, signature, phase: str = CREATE) -> dict[str, list[str]]:
        return self.validator.validate(signature, phase)

    def create(self, signature: Signature) -> Signature:
        """Persist a new, unconfirmed signature and mail its confirmation link.

        Raises SignatureValidationError (DuplicateSignatureError for a second
        signature with the same email on the same petition).
        """
        violations = self.validate(signature, CREATE)
        if violations:
            raise SignatureValidationError(violations)

        signature.unique_key = generate_unique_key()
        if signature.signed_at is None:
            signature.signed_at = datetime.utcnow()
        signature.confirmed = False
        signature.confirmed_at = None

        db.session.add(signature)
        commit_signature(signature)

        self.send_confirmation_mail(signature)
        return signature

    def update(self, signature: Signature, **attrs) -> Signature:
        """Apply profile fields and save, enforcing the petition's policy."""
        signature.apply_profile(attrs)
        self.save(signature)
        return signature

    def confirm(self, token: str, attrs=None, remote_addr=None, remote_browser=None) -> Signature:
        """Confirm the signature identified by *token*.

        Optional profile *attrs* are saved along with the confirmation and
        must satisfy the petition's policy. Counters are only touched when
        the signature actually moved from unconfirmed to confirmed.
        """
        signature = Signature.query.filter_by(unique_key=token).first() if token else None
        if signature is None:
            raise SignatureNotFoundError(f"No signature for key {token!r}")

        if attrs:
            signature.apply_profile(attrs)

        transitioned = signature.mark_confirmed()
        if transitioned:
            signature.confirmation_remote_addr = remote_addr
            signature.confirmation_remote_browser = remote_browser

        self.save(signature)

        if transitioned:
            self.aggregator.aggregate(signature)
        return signature

    def save(self, signature: Signature) -> None:
        """Validate an existing signature for update and commit it."""
        violations = self.validate(signature, UPDATE)
        if violations:
            db.session.rollback()
            raise SignatureValidationError(violations)
        commit_signature(signature)

    def send_confirmation_mail(self, signature: Signature) -> bool:
        """Mail the confirmation link unless the signer is already being reminded."""
        if signature.last_reminder_sent_at is not None:
            return False
        return dispatch_mail(self.mailer.send_confirmation, signature)
