"""
Seed script: schema + payment config + admin account + demo listings.

Usage:
    python -m backend.seed                     # config + admin from env
    python -m backend.seed --listings 800      # also generate a demo catalog
    python -m backend.seed --reset --listings 200
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.database import async_session, drop_db, init_db
from backend.models import Account, AdminConfig, Listing
from backend.security import hash_password
from config_env import ADMIN_EMAIL, ADMIN_PASSWORD, SEED_DEMO_LISTINGS
from data.sql_catalog_repository_impl import SINGLETON_ID
from domain.access import Role
from services.admin_service import config_defaults

logger = logging.getLogger(__name__)


NEIGHBORHOODS = {
    "NY": ["Bushwick", "Astoria", "Ridgewood", "Harlem", "Washington Heights", "Crown Heights",
           "Bed-Stuy", "Sunnyside", "Flatbush", "Inwood", "East Village", "LES", "Greenpoint"],
    "LA": ["Koreatown", "Echo Park", "Silver Lake", "North Hollywood", "Highland Park", "Westlake",
           "Palms", "Boyle Heights", "Van Nuys", "Culver City", "Eagle Rock", "Los Feliz"],
}

TYPES = ["Studio", "Private Room", "1 Bed Apt", "Basement Unit", "Shared Loft", "Micro-Unit"]
ADJECTIVES = ["Cozy", "Spacious", "Sunny", "Renovated", "Quiet", "Charming", "Hidden Gem",
              "Modern", "Vintage", "Clean"]
STREETS = ["Maple", "Oak", "Washington", "Main", "Broadway", "High", "Market", "Park"]

AMENITIES_POOL = [
    ["WiFi", "Heating", "Kitchen", "Laundry", "Parking", "Pet Friendly"],
    ["WiFi", "AC", "Dishwasher", "Gym Access", "Balcony", "Hardwood Floors"],
    ["WiFi", "Heating", "Kitchen", "Elevator", "Doorman", "Storage"],
    ["WiFi", "AC", "Washer/Dryer", "Rooftop Access", "Bike Storage", "Package Room"],
    ["WiFi", "Heating", "Renovated Kitchen", "High Ceilings", "Natural Light", "Near Subway"],
]


def generate_listings(count: int) -> list[dict]:
    """Deterministic demo catalog alternating NY / LA."""
    rows = []
    for i in range(count):
        city = "NY" if i % 2 == 0 else "LA"
        hoods = NEIGHBORHOODS[city]
        hood = hoods[(i * 7 + 3) % len(hoods)]
        kind = TYPES[(i * 13) % len(TYPES)]
        adj = ADJECTIVES[(i * 5) % len(ADJECTIVES)]

        if "Room" in kind:
            price = 500
        elif "Studio" in kind:
            price = 800
        else:
            price = 1100
        price += (i * 19) % 600
        if i % 50 == 0:
            price = int(price * 0.7)

        rows.append({
            "city": city,
            "title": f"{adj} {kind} in {hood}",
            "area": hood,
            "price": price // 10 * 10,
            "beds": 0 if ("Studio" in kind or "Room" in kind) else 1,
            "baths": 1,
            "sqft": 150 + (i * 23) % 500,
            "type": kind,
            "address": f"{100 + (i * 37) % 900} {STREETS[i % len(STREETS)]} St",
            "amenities": AMENITIES_POOL[i % len(AMENITIES_POOL)],
            "contact": f"landlord{i % 20}@rentals.com",
            "is_active": True,
        })
    return rows


def _admin_account(email: str, password: str) -> Account:
    return Account(
        email=email.strip().lower(),
        password_hash=hash_password(password),
        role=Role.ADMIN.value,
        is_approved=True,
        has_paid=True,
        favorites=[],
    )


async def ensure_admin_account(
    session: AsyncSession,
    email: str = ADMIN_EMAIL,
    password: str = ADMIN_PASSWORD,
) -> Optional[Account]:
    """Create the configured admin if missing; no-op without credentials."""
    if not email or not password:
        return None

    existing = (
        await session.execute(select(Account).where(Account.email == email.strip().lower()))
    ).scalar_one_or_none()
    if existing is not None:
        if existing.role != Role.ADMIN.value:
            logger.warning("ADMIN_EMAIL %s belongs to a non-admin account; not promoting", email)
        return existing

    account = _admin_account(email, password)
    session.add(account)
    try:
        await session.commit()
    except IntegrityError:
        # another worker seeded it first
        await session.rollback()
        return None
    logger.info("Seeded admin account %s", account.email)
    return account


async def seed(listing_count: int = SEED_DEMO_LISTINGS, reset: bool = False):
    if reset:
        print("Dropping existing tables ...")
        await drop_db()
    print("Initialising database schema ...")
    await init_db()

    # One commit: a failure leaves the database as it was
    async with async_session() as session:
        try:
            if await session.get(AdminConfig, SINGLETON_ID) is None:
                session.add(AdminConfig(id=SINGLETON_ID, **config_defaults()))
                print("Creating admin config ...")

            if ADMIN_EMAIL and ADMIN_PASSWORD:
                found = (
                    await session.execute(select(Account).where(Account.email == ADMIN_EMAIL))
                ).scalar_one_or_none()
                if found is None:
                    session.add(_admin_account(ADMIN_EMAIL, ADMIN_PASSWORD))
                    print(f"Creating admin {ADMIN_EMAIL} ...")
            else:
                print("ADMIN_EMAIL / ADMIN_PASSWORD not set, skipping admin account")

            if listing_count > 0:
                print(f"Generating {listing_count} listings ...")
                session.add_all(Listing(**row) for row in generate_listings(listing_count))

            await session.commit()
        except Exception:
            await session.rollback()
            raise
    print("Seed complete")


def main():
    parser = argparse.ArgumentParser(description="Seed the SecretLease database")
    parser.add_argument("--listings", type=int, default=SEED_DEMO_LISTINGS, help="demo listings to generate")
    parser.add_argument("--reset", action="store_true", help="drop all tables first")
    args = parser.parse_args()
    asyncio.run(seed(args.listings, args.reset))


if __name__ == "__main__":
    main()
