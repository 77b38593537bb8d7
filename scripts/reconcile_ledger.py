#!/usr/bin/env python3
"""
One-off script to reconcile event participant lists with registrations.

Lists approved registrations that are missing from their event's participant
list and participant entries whose status disagrees with the registration,
then repairs them after confirmation.

Usage:
    python scripts/reconcile_ledger.py [--dry-run]

Options:
    --dry-run    Show what would be repaired without making changes
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlmodel import Session

from app.core.database import engine
from app.registrations.drift import find_ledger_drift, repair_ledger_drift


def main(dry_run: bool = False):
    """Report ledger drift and repair it."""
    with Session(engine) as session:
        drift = find_ledger_drift(session)

        if drift.is_clean:
            print("All participant lists match their registrations.")
            return

        if drift.missing:
            print(f"{len(drift.missing)} approved registration(s) missing from participant lists:\n")
            for registration in drift.missing:
                title = registration.event.title if registration.event else "(deleted event)"
                print(f"  {title}: {registration.subject_id}")
            print()

        if drift.mismatched:
            print(f"{len(drift.mismatched)} participant entr(y/ies) with a stale status:\n")
            for participant, registration in drift.mismatched:
                title = registration.event.title if registration.event else "(deleted event)"
                print(
                    f"  {title}: {participant.subject_id} "
                    f"ledger={participant.status.value} registration={registration.status.value}"
                )
            print()

        if dry_run:
            print("--- DRY RUN: No changes made ---")
            return

        response = input("Repair these entries? [y/N]: ")
        if response.lower() != "y":
            print("Aborted.")
            return

        stats = repair_ledger_drift(session, drift)
        print(
            f"\nComplete: {stats['appended']} appended, "
            f"{stats['mirrored']} updated, {stats['skipped']} skipped"
        )


if __name__ == "__main__":
    dry_run = "--dry-run" in sys.argv
    main(dry_run=dry_run)
