from datetime import datetime, timedelta

from flask import current_app

from petitions.services.counters import (
    GLOBAL_SIZE_RANK,
    active_rate_key,
    city_tally_key,
    daily_count_key,
    last_activity_key,
    size_count_key,
)


EPOCH = datetime(1970, 1, 1)


class StatsService:
    """Service for reading petition statistics from the counter store."""

    def __init__(self, counters=None):
        self.counters = counters or current_app.extensions["counter_store"]

    def get_petition_stats(self, petition_id: int, days: int = 7, today=None) -> dict:
        """
        Get near-real-time statistics for one petition.

        Returns dict with:
            - total: Confirmed signature count
            - last_activity: ISO timestamp of the latest signature, or None
            - daily: One {"date", "count"} entry per day, oldest first
            - cities: Top cities as {"city", "count"}
            - active_rate: Last computed activity rate
        """
        today = today or datetime.utcnow().date()

        last = self.counters.get(last_activity_key(petition_id))
        daily = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            daily.append({
                "date": day.isoformat(),
                "count": self.counters.get(daily_count_key(petition_id, day)) or 0,
            })

        return {
            "petition_id": petition_id,
            "total": self.counters.get(size_count_key(petition_id)) or 0,
            "last_activity": (EPOCH + timedelta(seconds=last)).isoformat() if last else None,
            "daily": daily,
            "cities": [
                {"city": city, "count": int(count)}
                for city, count in self.counters.top_members(city_tally_key(petition_id), 10)
            ],
            "active_rate": self.counters.get(active_rate_key(petition_id)) or 0,
        }

    def get_size_ranking(self, limit: int = 10) -> list[dict]:
        """Get the largest petitions by confirmed signature count."""
        return [
            {"petition_id": int(member), "count": int(score)}
            for member, score in self.counters.top_members(GLOBAL_SIZE_RANK, limit)
        ]
