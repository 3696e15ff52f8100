#!/usr/bin/env python3
"""
Store GoHighLevel credentials for a profile (testing them first).

Usage:
  python scripts/configure_ghl.py --profile-id ID --email owner@example.com \
      --api-key KEY --location-id LOC [--no-auto-sync] [--skip-test]
"""
from __future__ import annotations

import argparse
import sys

from tarjeta.core.logging import configure_logging
from tarjeta.services.settings_service import SettingsService


def main() -> None:
    ap = argparse.ArgumentParser(description="Configure GoHighLevel for a profile")
    ap.add_argument("--profile-id", required=True, help="Profile id (account id)")
    ap.add_argument("--email", required=True, help="Account e-mail, used when the profile is created")
    ap.add_argument("--api-key", required=True, help="GHL private integration token")
    ap.add_argument("--location-id", required=True, help="GHL location (sub-account) id")
    ap.add_argument("--no-auto-sync", action="store_true", help="Store credentials with auto-sync disabled")
    ap.add_argument("--skip-test", action="store_true", help="Save without testing; the profile stays disconnected")
    args = ap.parse_args()

    configure_logging()
    svc = SettingsService()
    auto_sync = not args.no_auto_sync
    if args.skip_test:
        svc.save_ghl_settings(
            args.profile_id,
            args.email,
            api_key=args.api_key,
            location_id=args.location_id,
            auto_sync=auto_sync,
            connected=False,
        )
        print("OK: credentials saved (not connected)")
        return

    result = svc.connect(args.profile_id, args.email, args.api_key, args.location_id, auto_sync=auto_sync)
    if not result.success:
        print(f"Credentials saved but connection failed: {result.error}")
        raise SystemExit(2)
    print("OK: GoHighLevel connected")
    print(f"  Profile: {args.profile_id}")
    print(f"  Location: {args.location_id}")
    print(f"  Auto-sync: {'on' if auto_sync else 'off'}")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
