#!/usr/bin/env python3
"""Seed the launch catalog and, optionally, a few demo payments.

Usage:
    python scripts/seed_catalog.py                 # uses DATABASE_URL from env / .env
    python scripts/seed_catalog.py --demo-payments
    DATABASE_URL=... python scripts/seed_catalog.py
"""
from __future__ import annotations

import sys

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

# Ensure project root is on sys.path
sys.path.insert(0, ".")

from coursehub.catalog.seed import seed_catalog, seed_demo_payments
from coursehub.core.settings import get_settings
from coursehub.db.base import Base


def main() -> None:
    settings = get_settings()
    engine = create_engine(settings.database_url)

    # Create tables if they don't exist (useful for SQLite dev mode)
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        courses = seed_catalog(session)
        payments = seed_demo_payments(session) if "--demo-payments" in sys.argv else 0
        session.commit()

    print(f"Seeded {courses} courses and {payments} demo payments.")


if __name__ == "__main__":
    main()
