#!/usr/bin/env python3
"""
Create (or update) a card profile directly in the database.

Usage:
  python scripts/add_profile.py --email ana@example.com --name "Ana Lopez" \
      [--id ID] [--username ana] [--title CEO] [--company Acme] [--phone "+1 555 0100"] \
      [--resource "Portfolio=https://example.com/portfolio" ...]
"""
from __future__ import annotations

import argparse
import sys
import uuid

from tarjeta.repositories.sql_repository import SQLRepository


def parse_resource(value: str) -> dict:
    title, sep, url = value.partition("=")
    if not sep or not title.strip() or not url.strip():
        raise SystemExit(f"Invalid resource '{value}' (use Title=https://...)")
    return {"title": title.strip(), "url": url.strip()}


def main() -> None:
    ap = argparse.ArgumentParser(description="Create a card profile")
    ap.add_argument("--id", help="Profile id (default: random uuid)")
    ap.add_argument("--email", required=True, help="Account e-mail")
    ap.add_argument("--name", required=True, help="Full name shown on the card")
    ap.add_argument("--username", help="Public username used in /c/<username>")
    ap.add_argument("--title", help="Job title")
    ap.add_argument("--company", help="Company")
    ap.add_argument("--phone", help="Phone")
    ap.add_argument("--website", help="Website")
    ap.add_argument("--photo-url", help="Photo URL (absolute or relative to PUBLIC_BASE_URL)")
    ap.add_argument("--resource", action="append", default=[], help="Title=URL (repeatable, max 10)")
    args = ap.parse_args()

    repo = SQLRepository()
    username = (args.username or "").strip() or None
    profile_id = (args.id or "").strip() or str(uuid.uuid4())
    if username:
        owner = repo.get_profile_by_username(username)
        if owner and owner.id != profile_id:
            raise SystemExit(f"Username '{username}' already in use")

    profile = repo.upsert_profile(
        profile_id,
        email=args.email.strip(),
        full_name=args.name.strip(),
        username=username,
        job_title=args.title,
        company=args.company,
        phone=args.phone,
        website=args.website,
        photo_url=args.photo_url,
        resources=[parse_resource(item) for item in args.resource],
    )
    print("OK: profile saved")
    print(f"  Id: {profile.id}")
    if profile.username:
        print(f"  vCard: /c/{profile.username}/vcard")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
