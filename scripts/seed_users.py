#!/usr/bin/env python3
"""Seed the users table with demo wallets.

Each demo user has its pubkey as both credentials and a display name, so
its profile is complete. Users that already exist are left untouched.
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import from src
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.services.identity_service import IdentityService

DEMO_USERS = [
    ("9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM", "Bob"),
    ("5FHneW46xGXgs5mUiveU4sbTyGBzmstUspZC92UhjJM94", "Charlie"),
    ("GjJyeC1rB1p4xYWbXqM6zJY1ZJ8KJ8KJ8KJ8KJ8KJ8KJ8", "Diana"),
    ("H6ARHf6YXhGYeQfUzQNGk6rDNnlbQPH1i6XBLBwX3L1e", "Eve"),
    ("F4k3AdDr3ssF0rT3st1ngPurp0s3sOnly1234567890", "Frank"),
    ("Gr8tS0m3Addr3ss1234567890ABCDEFGHIJKLMNoPQR", "Grace"),
]


async def seed(service: IdentityService) -> int:
    """Create the demo users that do not exist yet.

    Returns:
        int: Number of users created.
    """
    created = 0
    for pubkey, name in DEMO_USERS:
        existing = await service.store.find_by_credential(pubkey)
        if existing:
            print(f"   ⏭️  User \"{name}\" already exists, skipping...")
            continue

        await service.authenticate(pubkey=pubkey, address=pubkey, name=name)
        created += 1
        print(f"   ✅ Created user \"{name}\"")

    return created


def main() -> None:
    """Main execution function."""
    print("\n🌱 Seeding database with demo users...\n")

    try:
        service = IdentityService()
    except Exception as e:
        print(f"❌ Error: Failed to initialize user store: {e}")
        sys.exit(1)

    try:
        created = asyncio.run(seed(service))
    except Exception as e:
        print(f"\n❌ Error seeding database: {e}")
        sys.exit(1)

    print(f"\n✅ Seeding complete: {created} created, {len(DEMO_USERS) - created} already present\n")


if __name__ == "__main__":
    main()
