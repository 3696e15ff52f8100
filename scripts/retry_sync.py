#!/usr/bin/env python3
"""
Retry the GoHighLevel sync of one or more contacts.

Usage:
  python scripts/retry_sync.py CONTACT_ID [CONTACT_ID ...]
  python scripts/retry_sync.py --failed
"""
from __future__ import annotations

import argparse
import sys

from tarjeta.core.logging import configure_logging
from tarjeta.services.sync_service import ContactSyncService, SyncError


def main() -> None:
    ap = argparse.ArgumentParser(description="Retry CRM sync for contacts")
    ap.add_argument("contact_ids", nargs="*", help="Contact ids to sync again")
    ap.add_argument("--failed", action="store_true", help="Retry every contact currently marked failed")
    args = ap.parse_args()

    if not args.contact_ids and not args.failed:
        raise SystemExit("Pass contact ids or --failed")

    configure_logging()
    svc = ContactSyncService()
    outcomes = []
    for contact_id in args.contact_ids:
        try:
            outcomes.append((contact_id, svc.sync_contact(contact_id)))
        except SyncError as exc:
            print(f"SKIP {contact_id}: {exc}")
    if args.failed:
        outcomes.extend(svc.retry_failed())

    failures = 0
    for contact_id, outcome in outcomes:
        if outcome.success:
            print(f"OK   {contact_id} -> {outcome.ghl_contact_id} ({'created' if outcome.is_new else 'updated'})")
        else:
            failures += 1
            print(f"FAIL {contact_id} [{outcome.status}]: {outcome.error}")
    print(f"{len(outcomes) - failures}/{len(outcomes)} synced")
    if failures:
        raise SystemExit(2)


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
