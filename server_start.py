"""
Unified startup script.

Handles:
    1. Database initialisation (creates tables, payment config, admin account)
    2. Optional demo catalog generation
    3. Starts FastAPI backend (uvicorn) in foreground

Usage:
    python server_start.py                   # seed + api
    python server_start.py --listings 800    # also generate demo listings
    python server_start.py --seed-only       # seed and exit
"""

import asyncio
import os
import sys

os.chdir(os.path.dirname(os.path.abspath(__file__)))


def run_seed(listing_count: int):
    """Create schema, config row and admin account. Failures abort startup."""
    from backend.seed import seed
    asyncio.run(seed(listing_count))


def main():
    import argparse

    from config_env import SEED_DEMO_LISTINGS

    parser = argparse.ArgumentParser()
    parser.add_argument("--seed-only", action="store_true", help="Seed the database and exit")
    parser.add_argument("--listings", type=int, default=SEED_DEMO_LISTINGS, help="Demo listings to generate")
    args = parser.parse_args()

    port = os.environ.get("PORT", "8000")

    print("=" * 60)
    print("  SecretLease -- Startup")
    print("=" * 60)

    print("\n[1/2] Database initialization...")
    run_seed(args.listings)

    if args.seed_only:
        return

    print(f"\n[2/2] Starting FastAPI on port {port}...")
    os.execvp(
        sys.executable,
        [sys.executable, "-m", "uvicorn", "backend.app:app",
         "--host", "0.0.0.0", "--port", port],
    )


if __name__ == "__main__":
    main()
