#!/usr/bin/env python3
"""
Replay confirmed signatures of a petition into the counter store.
Rebuilds the daily buckets and last activity after the counters were lost.
Run this after flushing the petition's daily-count keys:

    python scripts/rebuild_daily_counts.py <petition_id>
"""

import sys
sys.path.insert(0, ".")

from petitions import create_app, counters, db
from petitions.config import Config
from petitions.models import Petition, Signature
from petitions.services.counters import CounterAggregator


class RebuildConfig(Config):
    # a one-off replay must not start the reminder sweep
    SCHEDULER_ENABLED = False


def rebuild(petition_id):
    app = create_app(RebuildConfig)

    with app.app_context():
        petition = db.session.get(Petition, petition_id)
        if not petition:
            print(f"Error: petition {petition_id} not found")
            return 1

        print(f"Rebuilding daily counts for {petition.name}...")
        aggregator = CounterAggregator(counters)

        replayed = 0
        query = Signature.confirmed_only().filter_by(petition_id=petition.id).order_by(Signature.id)
        for signature in query.yield_per(1000):
            aggregator.aggregate(signature, background=True)
            replayed += 1

        print(f"Done! Replayed {replayed} confirmed signatures.")

    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2 or not sys.argv[1].isdigit():
        print(__doc__)
        sys.exit(2)
    sys.exit(rebuild(int(sys.argv[1])))
