"""Field validation for signatures, gated by the petition's policy.

Unconditional rules run on every save. Policy rules only run on ``update``:
signing stays quick, completing the profile is deferred to a later step
(usually confirmation) and only when the petition asks for it.
"""

import re
from collections import defaultdict
from datetime import date, datetime

from petitions import db
from petitions.models import Signature
from petitions.services.policy import PetitionPolicy
from petitions.utils import is_integer, is_valid_email, years_before

CREATE = "create"
UPDATE = "update"
PHASES = (CREATE, UPDATE)

_NAME_RE = re.compile(r".+[ .].+")


def _length(value, minimum=None, maximum=None, allow_blank=False) -> str | None:
    """Return a length violation message for *value*, or None."""
    if allow_blank and not value:
        return None
    length = len(value or "")
    if minimum is not None and length < minimum:
        return f"is too short (minimum is {minimum} characters)"
    if maximum is not None and length > maximum:
        return f"is too long (maximum is {maximum} characters)"
    return None


def normalize(signature) -> None:
    """Strip whitespace and lower-case the email in place."""
    if signature.name is not None:
        signature.name = str(signature.name).strip()
    if signature.street_number is not None:
        signature.street_number = str(signature.street_number).strip()
    email = signature.email
    signature.email = "" if email is None else str(email).strip().lower()


def check_petition(signature, policy, today):
    if not signature.petition_id:
        yield "petition_id", "must belong to a petition"


def check_name(signature, policy, today):
    reason = _length(signature.name, 3, 255)
    if reason:
        yield "name", reason
    if not _NAME_RE.fullmatch(signature.name or ""):
        yield "name", "must contain a first and last name"


def check_email(signature, policy, today):
    if not is_valid_email(signature.email):
        yield "email", "is not a valid email address"
        return

    with db.session.no_autoflush:
        duplicate = Signature.find_duplicate(
            signature.email, signature.petition_id or 0, exclude_id=signature.id
        )
    if duplicate is not None:
        yield "email", "has already been taken"


def check_function(signature, policy, today):
    reason = _length(signature.function, maximum=255, allow_blank=True)
    if reason:
        yield "function", reason


def check_full_address(signature, policy, today):
    for field in ("city", "street"):
        reason = _length(getattr(signature, field), 3, 255)
        if reason:
            yield field, reason
    if not is_integer(signature.street_number):
        yield "street_number", "is not a number"
    reason = _length(signature.street_number_suffix, 1, 255, allow_blank=True)
    if reason:
        yield "street_number_suffix", reason


def check_minimum_age(signature, policy, today):
    birth_date = signature.birth_date
    if isinstance(birth_date, datetime):
        birth_date = birth_date.date()
    if not isinstance(birth_date, date):
        yield "birth_date", "is not a valid date"
        return
    latest = years_before(today, policy.required_minimum_age)
    if birth_date > latest:
        yield "birth_date", f"must be on or before {latest.isoformat()}"


def check_birth_city(signature, policy, today):
    reason = _length(signature.birth_city, 3, 255)
    if reason:
        yield "birth_city", reason


# (policy gate or None for unconditional, phases the rule runs in, check)
RULES = [
    (None, (CREATE,), check_petition),
    (None, PHASES, check_name),
    (None, PHASES, check_email),
    (None, PHASES, check_function),
    ("requires_full_address", (UPDATE,), check_full_address),
    ("requires_minimum_age", (UPDATE,), check_minimum_age),
    ("requires_birth_city", (UPDATE,), check_birth_city),
]


class SignatureValidator:
    """Collects every violation of a signature for a lifecycle phase."""

    def __init__(self, rules=None, today=None):
        self.rules = rules if rules is not None else RULES
        self.today = today

    def validate(self, signature, phase: str = CREATE) -> dict[str, list[str]]:
        """Normalize *signature* and return its violations.

        The result maps field names to lists of reasons; an empty dict means
        the signature is valid for *phase*.
        """
        if phase not in PHASES:
            raise ValueError(f"Unknown validation phase: {phase!r}")

        normalize(signature)
        policy = PetitionPolicy.for_signature(signature)
        today = self.today or date.today()

        violations = defaultdict(list)
        for gate, phases, check in self.rules:
            if phase not in phases:
                continue
            if gate is not None and not getattr(policy, gate):
                continue
            for field, reason in check(signature, policy, today):
                violations[field].append(reason)

        return dict(violations)
