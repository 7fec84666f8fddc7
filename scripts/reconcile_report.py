#!/usr/bin/env python3
"""
Report games whose stored status has drifted from their participants.

For every game, compares the stored status, tentative flag, time and host
with what the reconciler derives from the participant list, and prints the
differences. With --apply, writes the derived values back using service
privileges and removes games nobody is playing in.

Usage:
    python scripts/reconcile_report.py [--apply]

Options:
    --apply    Write the reconciled values instead of only reporting them
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlmodel import Session

from courtside.core.database import create_db_and_tables, engine
from courtside.engine.orchestrator import SyncOrchestrator
from courtside.engine.reconciler import reconcile, write_intents
from courtside.store.games import GameStore
from courtside.store.policy import SERVICE_ACTOR


def main(apply: bool = False):
    """Compare stored and reconciled state for every game."""
    create_db_and_tables()

    with Session(engine) as session:
        store = GameStore(session)
        games = store.fetch_games()

        if not games:
            print("No games found.")
            return

        print(f"Checking {len(games)} games:\n")

        drifted = 0
        abandoned = 0
        for record, participants in games:
            print(f"{record.activity_type} on {record.game_date} at {record.primary_time} ({record.id})")

            if not participants:
                print("  No participants: hidden from listings")
                abandoned += 1
                print()
                continue

            view = reconcile(record, participants)
            intents = write_intents(record, view)
            if view.owner_id != record.host_id:
                intents["host_id"] = view.owner_id

            print(f"  Players:    {view.participant_count}")
            print(f"  Stored:     status={record.status} tentative={record.tentative} host={record.host_id}")
            print(f"  Reconciled: status={view.status.value} time={view.canonical_time} host={view.owner_id}")
            if view.vote_counts and view.tentative:
                print(f"  Votes:      {view.vote_counts} (stale: {view.stale_votes})")

            if intents:
                drifted += 1
                print(f"  Drift:      {intents}")
            else:
                print("  Status: In sync")
            print()

        print(f"{drifted} drifted, {abandoned} abandoned")

        if not apply:
            print("--- Report only: run with --apply to write changes ---")
            return

        stats = SyncOrchestrator(store).reconcile_all(actor=SERVICE_ACTOR)
        print(f"\nComplete: {stats}")


if __name__ == "__main__":
    main(apply="--apply" in sys.argv)
