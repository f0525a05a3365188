from flask import Blueprint, request

from petitions import db
from petitions.errors import (
    PersistenceFailure,
    SignatureNotFoundError,
    SignatureValidationError,
)
from petitions.models import Petition, Signature
from petitions.services.signatures import SignatureService
from petitions.utils import parse_date

bp = Blueprint("signatures", __name__)

_BOOLEAN_FIELDS = ("dutch_citizen", "subscribe_to_updates")


def _as_bool(value):
    if isinstance(value, bool) or value is None:
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _payload() -> dict:
    """Read the signer's fields from a JSON body or a submitted form."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form.to_dict()

    attrs = {k: data[k] for k in Signature.PROFILE_FIELDS if k in data}
    if "birth_date" in attrs:
        attrs["birth_date"] = parse_date(attrs["birth_date"])
    for field in _BOOLEAN_FIELDS:
        if field in attrs:
            attrs[field] = _as_bool(attrs[field])
    for field, value in attrs.items():
        if field not in _BOOLEAN_FIELDS and field != "birth_date" and value is not None:
            attrs[field] = str(value)
    return attrs


def _browser():
    return (request.user_agent.string or "")[:255] or None


@bp.route("/petitions/<int:petition_id>/signatures", methods=["POST"])
def create(petition_id):
    """Sign a petition. The signer receives a confirmation link by mail."""
    petition = db.session.get(Petition, petition_id)
    if not petition:
        return {"error": "Petition not found"}, 404

    signature = Signature(
        petition_id=petition.id,
        signature_remote_addr=request.remote_addr,
        signature_remote_browser=_browser(),
    )
    signature.apply_profile(_payload())

    try:
        SignatureService().create(signature)
    except SignatureValidationError as exc:
        return {"errors": exc.violations}, 422
    except PersistenceFailure:
        return {"error": "Signature could not be saved"}, 500

    return signature.to_dict(), 201


@bp.route("/signatures/<key>", methods=["PATCH"])
def update(key):
    """Complete or correct the signer's details."""
    signature = Signature.query.filter_by(unique_key=key).first()
    if not signature:
        return {"error": "Signature not found"}, 404

    try:
        SignatureService().update(signature, **_payload())
    except SignatureValidationError as exc:
        return {"errors": exc.violations}, 422
    except PersistenceFailure:
        return {"error": "Signature could not be saved"}, 500

    return signature.to_dict()


@bp.route("/signatures/<key>/confirm", methods=["GET", "POST"])
def confirm(key):
    """Confirm a signature from the mailed link, optionally with profile fields."""
    attrs = _payload() if request.method == "POST" else None

    try:
        signature = SignatureService().confirm(
            key,
            attrs=attrs,
            remote_addr=request.remote_addr,
            remote_browser=_browser(),
        )
    except SignatureNotFoundError:
        return {"error": "Signature not found"}, 404
    except SignatureValidationError as exc:
        return {"errors": exc.violations}, 422
    except PersistenceFailure:
        return {"error": "Signature could not be saved"}, 500

    return signature.to_dict()
