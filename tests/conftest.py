"""
Pytest configuration and fixtures.
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from petitions import create_app, db
from petitions.config import Config
from petitions.errors import CounterUpdateFailure
from petitions.models import Petition, PetitionType, Signature, generate_unique_key
from petitions.services.signatures import SignatureService


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SCHEDULER_ENABLED = False
    BASE_URL = "https://petitions.example"


class FakeCounterStore:
    """In-memory counter store with the same interface as CounterStore."""

    def __init__(self):
        self.values = {}
        self.scored = {}
        self.failing = False

    def _check(self):
        if self.failing:
            raise CounterUpdateFailure("counter store is down")

    def get(self, key):
        self._check()
        return self.values.get(key)

    def set(self, key, value):
        self._check()
        self.values[key] = int(value)

    def increment(self, key):
        self._check()
        self.values[key] = self.values.get(key, 0) + 1
        return self.values[key]

    def increment_scored_member(self, set_key, member, delta=1):
        self._check()
        members = self.scored.setdefault(set_key, {})
        members[str(member)] = members.get(str(member), 0) + delta
        return float(members[str(member)])

    def score(self, set_key, member):
        self._check()
        return self.scored.get(set_key, {}).get(str(member))

    def top_members(self, set_key, limit=10):
        self._check()
        members = self.scored.get(set_key, {})
        ranked = sorted(members.items(), key=lambda item: item[1], reverse=True)
        return [(member, float(score)) for member, score in ranked[:limit]]


@pytest.fixture
def counter_store():
    return FakeCounterStore()


@pytest.fixture
def app(counter_store):
    app = create_app(TestingConfig)
    app.extensions["counter_store"] = counter_store

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mailer():
    return MagicMock()


@pytest.fixture
def service(app, counter_store, mailer):
    return SignatureService(counters=counter_store, mailer=mailer)


@pytest.fixture
def make_petition(app):
    """Create a petition, with a petition type when type options are given."""

    def _make(name="Save the park", **type_options):
        petition_type = None
        if type_options:
            petition_type = PetitionType(name=f"{name} type", **type_options)
            db.session.add(petition_type)
        petition = Petition(name=name, petition_type=petition_type)
        db.session.add(petition)
        db.session.commit()
        return petition

    return _make


@pytest.fixture
def petition(make_petition):
    return make_petition()


@pytest.fixture
def make_signature(app):
    """Insert a signature directly, bypassing validation."""

    def _make(petition, email="jane@example.com", name="Jane D.", **fields):
        fields.setdefault("signed_at", datetime.utcnow() - timedelta(days=10))
        signature = Signature(
            petition_id=petition.id,
            email=email,
            name=name,
            unique_key=generate_unique_key(),
            **fields,
        )
        db.session.add(signature)
        db.session.commit()
        return signature

    return _make
