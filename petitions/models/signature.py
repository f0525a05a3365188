import secrets
from datetime import datetime

from petitions import db


def generate_unique_key() -> str:
    """Return a fresh, URL-safe confirmation token (24 characters)."""
    return secrets.token_urlsafe(18)


class Signature(db.Model):
    """A petition signature, confirmed or still waiting for confirmation."""

    __tablename__ = "signatures"
    __table_args__ = (
        db.UniqueConstraint("email", "petition_id", name="uq_signatures_email_petition"),
    )

    id = db.Column(db.Integer, primary_key=True)

    # 0 means "unassigned"; such signatures are never counted
    petition_id = db.Column(
        db.Integer, db.ForeignKey("petitions.id"), nullable=False, default=0, index=True
    )
    unique_key = db.Column(db.String(255), unique=True, index=True)

    # Person
    name = db.Column(db.String(255))
    email = db.Column(db.String(255))
    street = db.Column(db.String(255))
    street_number = db.Column(db.String(255))
    street_number_suffix = db.Column(db.String(255))
    postal_code = db.Column(db.String(255))
    city = db.Column(db.String(255))
    function = db.Column(db.String(255))
    country_code = db.Column(db.String(2))
    birth_date = db.Column(db.Date)
    birth_city = db.Column(db.String(255))
    dutch_citizen = db.Column(db.Boolean)
    subscribe_to_updates = db.Column(db.Boolean, default=False)

    # Lifecycle
    signed_at = db.Column(db.DateTime)
    confirmed_at = db.Column(db.DateTime)
    confirmed = db.Column(db.Boolean, default=False, nullable=False)
    visible = db.Column(db.Boolean, default=False)
    special = db.Column(db.Boolean, default=False)

    # Audit
    signature_remote_addr = db.Column(db.String(255))
    signature_remote_browser = db.Column(db.String(255))
    confirmation_remote_addr = db.Column(db.String(255))
    confirmation_remote_browser = db.Column(db.String(255))
    sort_order = db.Column(db.Integer, default=0, nullable=False)
    reminders_sent = db.Column(db.Integer)
    last_reminder_sent_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Relationships
    petition = db.relationship("Petition", back_populates="signatures")

    # Fields a signer may fill in or correct after signing
    PROFILE_FIELDS = (
        "name",
        "email",
        "street",
        "street_number",
        "street_number_suffix",
        "postal_code",
        "city",
        "function",
        "country_code",
        "birth_date",
        "birth_city",
        "dutch_citizen",
        "subscribe_to_updates",
    )

    @classmethod
    def confirmed_only(cls):
        return cls.query.filter_by(confirmed=True)

    @classmethod
    def hidden(cls):
        return cls.query.filter_by(visible=False)

    @classmethod
    def subscribed(cls):
        return cls.query.filter_by(confirmed=True, subscribe_to_updates=True)

    @classmethod
    def special_only(cls):
        return cls.query.filter_by(special=True, confirmed=True)

    @classmethod
    def visible_only(cls):
        return cls.query.filter_by(visible=True, confirmed=True)

    @classmethod
    def find_duplicate(cls, email, petition_id, exclude_id=None):
        """Return another signature with the same email on the same petition.

        Stored emails are compared trimmed and lower-cased so rows written
        before normalization still count as duplicates.
        """
        query = cls.query.filter(
            db.func.lower(db.func.trim(cls.email)) == (email or "").strip().lower(),
            cls.petition_id == petition_id,
        )
        if exclude_id is not None:
            query = query.filter(cls.id != exclude_id)
        return query.first()

    def apply_profile(self, attrs: dict) -> None:
        """Copy whitelisted person fields from *attrs* onto this signature."""
        for field in self.PROFILE_FIELDS:
            if field in attrs:
                setattr(self, field, attrs[field])

    def mark_confirmed(self, now=None) -> bool:
        """Move to the confirmed state.

        Returns True only when the signature was unconfirmed before the call.
        ``confirmed_at`` is stamped the first time and never changed after.
        """
        transitioned = not self.confirmed
        self.confirmed = True
        if self.confirmed_at is None:
            self.confirmed_at = now or datetime.utcnow()
        return transitioned

    def to_dict(self):
        return {
            "id": self.id,
            "petition_id": self.petition_id,
            "name": self.name,
            "email": self.email,
            "city": self.city,
            "confirmed": self.confirmed,
            "visible": self.visible,
            "special": self.special,
            "signed_at": self.signed_at.isoformat() if self.signed_at else None,
            "confirmed_at": self.confirmed_at.isoformat() if self.confirmed_at else None,
        }

    def __repr__(self):
        status = "confirmed" if self.confirmed else "unconfirmed"
        return f"<Signature {self.id} - {status}>"
