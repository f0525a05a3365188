import logging

from flask import Blueprint, request

from petitions import db
from petitions.errors import CounterUpdateFailure
from petitions.models import Petition
from petitions.services.stats import StatsService

logger = logging.getLogger(__name__)

bp = Blueprint("stats", __name__)


@bp.route("/petitions/<int:petition_id>")
def petition(petition_id):
    """Counts, daily trend and city breakdown for one petition."""
    if not db.session.get(Petition, petition_id):
        return {"error": "Petition not found"}, 404

    days = request.args.get("days", 7, type=int)
    days = max(1, min(days, 90))

    try:
        return StatsService().get_petition_stats(petition_id, days=days)
    except CounterUpdateFailure:
        logger.exception("Could not read statistics for petition %s", petition_id)
        return {"error": "Statistics are temporarily unavailable"}, 503


@bp.route("/ranking")
def ranking():
    """Petitions ordered by confirmed signature count."""
    limit = request.args.get("limit", 10, type=int)
    limit = max(1, min(limit, 100))

    try:
        return {"petitions": StatsService().get_size_ranking(limit)}
    except CounterUpdateFailure:
        logger.exception("Could not read the size ranking")
        return {"error": "Statistics are temporarily unavailable"}, 503
