from datetime import datetime, timedelta

from petitions import db

# Number of daily buckets the activity rate looks back over
ACTIVE_RATE_DAYS = 7


class PetitionType(db.Model):
    """Per-type configuration of what a petition asks from its signers."""

    __tablename__ = "petition_types"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    require_signature_full_address = db.Column(db.Boolean, default=False, nullable=False)
    require_person_born_at = db.Column(db.Boolean, default=False, nullable=False)
    required_minimum_age = db.Column(db.Integer)
    require_person_birth_city = db.Column(db.Boolean, default=False, nullable=False)
    country_code = db.Column(db.String(2))

    created_at = db.Column(db.DateTime, server_default=db.func.now())

    # Relationships
    petitions = db.relationship("Petition", back_populates="petition_type")

    def __repr__(self):
        return f"<PetitionType {self.name}>"


class Petition(db.Model):
    """A petition that people can sign."""

    __tablename__ = "petitions"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    petition_type_id = db.Column(db.Integer, db.ForeignKey("petition_types.id"), nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    # Relationships
    petition_type = db.relationship("PetitionType", back_populates="petitions")
    signatures = db.relationship(
        "Signature",
        back_populates="petition",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def update_active_rate(self, counters, today=None) -> int:
        """Recompute the activity rate from the most recent daily buckets.

        Each of the last ``ACTIVE_RATE_DAYS`` days contributes its count
        weighted by recency: today counts ``ACTIVE_RATE_DAYS`` times, the
        oldest bucket once. The result is stored under ``active-rate:{id}``.
        """
        from petitions.services.counters import active_rate_key, daily_count_key

        today = today or datetime.utcnow().date()
        rate = 0
        for offset in range(ACTIVE_RATE_DAYS):
            day = today - timedelta(days=offset)
            count = counters.get(daily_count_key(self.id, day)) or 0
            rate += count * (ACTIVE_RATE_DAYS - offset)

        counters.set(active_rate_key(self.id), rate)
        return rate

    def __repr__(self):
        return f"<Petition {self.id} - {self.name}>"
