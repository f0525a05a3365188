"""Failures raised by the signature lifecycle and counter services."""


class SignatureError(Exception):
    """Base class for signature lifecycle failures."""


class SignatureValidationError(SignatureError):
    """One or more field violations; the signature was not persisted.

    ``violations`` maps a field name to a list of human-readable reasons.
    """

    def __init__(self, violations: dict[str, list[str]]):
        self.violations = violations
        fields = ", ".join(sorted(violations))
        super().__init__(f"Signature is invalid: {fields}")


class DuplicateSignatureError(SignatureValidationError):
    """Unique constraint hit on (email, petition) or on the unique key."""

    def __init__(self, message: str = "has already been taken"):
        super().__init__({"email": [message]})


class SignatureNotFoundError(SignatureError):
    """No signature matches the presented confirmation token."""


class CounterUpdateFailure(SignatureError):
    """The counter store could not be reached or rejected a command."""


class PersistenceFailure(SignatureError):
    """A signature write could not be committed."""
