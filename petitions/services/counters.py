"""Redis-backed counters for near-real-time petition statistics.

The counter store is derived, best-effort state: every write happens after
the signature record has been committed and a failure here never fails the
signature write. Batch recomputation reconciles whatever gets lost.
"""

import calendar
import functools
import logging

import redis

from petitions.errors import CounterUpdateFailure

logger = logging.getLogger(__name__)

# Stored "last activity" value assumed when a petition has none yet
LAST_ACTIVITY_DEFAULT = 3600

GLOBAL_SIZE_RANK = "global-size-rank"


def last_activity_key(petition_id) -> str:
    return f"last-activity:{petition_id}"


def daily_count_key(petition_id, day) -> str:
    """Key of the daily bucket for *day* (a date or datetime)."""
    return f"daily-count:{petition_id}:{day.year}:{day.month}:{day.day}"


def city_tally_key(petition_id) -> str:
    return f"city-tally:{petition_id}"


def size_count_key(petition_id) -> str:
    return f"size-count:{petition_id}"


def active_rate_key(petition_id) -> str:
    return f"active-rate:{petition_id}"


def _translate_errors(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.RedisError as exc:
            raise CounterUpdateFailure(f"{method.__name__} failed: {exc}") from exc
    return wrapper


class CounterStore:
    """Narrow get/set/increment interface over a Redis client.

    Works as a Flask extension: ``counters.init_app(app)`` connects using
    ``REDIS_URL`` and registers itself as ``app.extensions["counter_store"]``.
    """

    def __init__(self, client=None):
        self.client = client

    def init_app(self, app) -> None:
        if self.client is None:
            self.client = redis.Redis.from_url(
                app.config["REDIS_URL"],
                socket_timeout=app.config.get("REDIS_SOCKET_TIMEOUT"),
                decode_responses=True,
            )
        app.extensions["counter_store"] = self

    @_translate_errors
    def get(self, key: str) -> int | None:
        value = self.client.get(key)
        return int(value) if value is not None else None

    @_translate_errors
    def set(self, key: str, value: int) -> None:
        self.client.set(key, int(value))

    @_translate_errors
    def increment(self, key: str) -> int:
        return self.client.incr(key)

    @_translate_errors
    def increment_scored_member(self, set_key: str, member, delta: int = 1) -> float:
        return self.client.zincrby(set_key, delta, str(member))

    @_translate_errors
    def score(self, set_key: str, member) -> float | None:
        return self.client.zscore(set_key, str(member))

    @_translate_errors
    def top_members(self, set_key: str, limit: int = 10) -> list[tuple[str, float]]:
        """Return the *limit* highest scored members, best first."""
        return [
            (member, score)
            for member, score in self.client.zrevrange(set_key, 0, limit - 1, withscores=True)
        ]


def to_epoch(moment) -> int:
    """Seconds since the epoch for a naive UTC datetime."""
    return calendar.timegm(moment.utctimetuple())


class CounterAggregator:
    """Updates the derived counters after a confirmation state change."""

    def __init__(self, counters: CounterStore):
        self.counters = counters

    def aggregate(self, signature, background: bool = False) -> None:
        """Record a confirmation of *signature* in the counter store.

        Last activity and the daily bucket are always updated. City tally,
        size ranking, size count and the activity rate are left alone for
        ``background`` (batch reprocessing) calls so they are not counted
        twice.
        """
        petition = signature.petition
        if not signature.petition_id or petition is None:
            logger.debug("Skipping counters for signature %s without petition", signature.id)
            return

        moment = signature.signed_at or signature.updated_at
        if moment is None:
            return

        self._attempt("last-activity", petition.id, self.bump_last_activity, petition.id, moment)
        self._attempt(
            "daily-count", petition.id, self.counters.increment, daily_count_key(petition.id, moment)
        )

        if background:
            return

        if signature.city:
            self._attempt(
                "city-tally",
                petition.id,
                self.counters.increment_scored_member,
                city_tally_key(petition.id),
                signature.city.strip().lower(),
                1,
            )
        self._attempt(
            "size-rank",
            petition.id,
            self.counters.increment_scored_member,
            GLOBAL_SIZE_RANK,
            petition.id,
            1,
        )
        self._attempt("size-count", petition.id, self.counters.increment, size_count_key(petition.id))
        self._attempt("activity-rate", petition.id, petition.update_active_rate, self.counters)

    def bump_last_activity(self, petition_id, moment) -> bool:
        """Store *moment* as last activity if it is newer than the stored one.

        Returns True when the stored value was overwritten.
        """
        key = last_activity_key(petition_id)
        last = self.counters.get(key)
        if last is None:
            last = LAST_ACTIVITY_DEFAULT

        timestamp = to_epoch(moment)
        if timestamp <= last:
            return False

        self.counters.set(key, timestamp)
        return True

    def _attempt(self, label, petition_id, operation, *args) -> None:
        try:
            operation(*args)
        except CounterUpdateFailure:
            logger.exception("Counter update %s failed for petition %s", label, petition_id)
