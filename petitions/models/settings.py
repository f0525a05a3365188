from petitions import db


class Settings(db.Model):
    """Application settings stored in the database."""

    __tablename__ = "settings"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    value = db.Column(db.Text)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    @classmethod
    def get(cls, key: str, default: str = None) -> str:
        """Get a setting value by key."""
        setting = cls.query.filter_by(key=key).first()
        return setting.value if setting else default

    @classmethod
    def set(cls, key: str, value: str) -> None:
        """Set a setting value."""
        setting = cls.query.filter_by(key=key).first()
        if setting:
            setting.value = value
        else:
            setting = cls(key=key, value=value)
            db.session.add(setting)
        db.session.commit()

    @classmethod
    def get_int(cls, key: str, default: int) -> int:
        """Get a setting as an integer, falling back to *default*."""
        value = cls.get(key)
        try:
            return int(value) if value else default
        except (ValueError, TypeError):
            return default

    # ------------------------------------------------------------------
    # Reminder settings
    # ------------------------------------------------------------------

    @classmethod
    def get_reminder_config(cls) -> dict:
        """Return the reminder sweep settings as a dict."""
        return {
            "after_days": cls.get_int("reminder_after_days", 7),
            "max_reminders": cls.get_int("max_reminders", 1),
            "schedule": cls.get("reminder_schedule", "daily"),
        }

    # ------------------------------------------------------------------
    # SMTP / email settings
    # ------------------------------------------------------------------

    @classmethod
    def get_smtp_config(cls) -> dict:
        """Return all SMTP-related settings as a dict."""
        return {
            "host": cls.get("smtp_host", ""),
            "port": int(cls.get("smtp_port", "587") or "587"),
            "user": cls.get("smtp_user", ""),
            "password": cls.get("smtp_password", ""),
            "from_email": cls.get("smtp_from_email", ""),
            "use_tls": (cls.get("smtp_use_tls", "true") or "true").lower() != "false",
        }

    def __repr__(self):
        return f"<Settings {self.key}={self.value}>"
