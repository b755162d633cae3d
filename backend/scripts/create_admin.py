#!/usr/bin/env python3
"""
Set up a fresh IQOL database: create the tables, the first admin and,
optionally, the brands to track.

Run from backend directory:
  python scripts/create_admin.py

Override the .env values or add brands:
  python scripts/create_admin.py --email ops@iqol.in --password ... --brand TruEstate --brand ACN
"""

import asyncio
import argparse
import sys
from pathlib import Path

# Ensure backend root is on path
backend_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_root))

from iqol.config import get_settings
from iqol.database import async_session, init_db
from iqol.services.bootstrap import ensure_brands, ensure_first_admin


async def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Create the first admin user and seed brands")
    parser.add_argument("--email", default=settings.first_admin_email, help="Admin email (default: FIRST_ADMIN_EMAIL)")
    parser.add_argument("--password", default=settings.first_admin_password, help="Admin password (default: FIRST_ADMIN_PASSWORD)")
    parser.add_argument("--name", default=settings.first_admin_name, help="Admin display name")
    parser.add_argument("--brand", action="append", default=[], help="Brand to create if missing; repeatable")
    args = parser.parse_args()

    if not args.email or not args.password:
        print("Error: pass --email/--password or set FIRST_ADMIN_EMAIL and FIRST_ADMIN_PASSWORD in .env")
        sys.exit(1)

    await init_db()
    async with async_session() as db:
        admin = await ensure_first_admin(db, args.email, args.password, args.name)
        brands = await ensure_brands(db, args.brand)
        await db.commit()

    if admin:
        print(f"Created admin user: {admin.email}")
    else:
        print("Users already exist. Only the first admin is created on an empty database.")
    for brand in brands:
        print(f"  Added brand {brand.name} (id {brand.id})")


if __name__ == "__main__":
    asyncio.run(main())
