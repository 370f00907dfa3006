# scripts/seed_demo.py
# Seeds the configured store; run with USE_MONGO=1 to persist into MongoDB.
import asyncio
from datetime import datetime, timedelta, timezone

from ecobites.core.security import hash_password
from ecobites.deps import get_repo

DEMO_EMAIL = "asha@x.com"


async def main():
    repo = get_repo()
    user = await repo.find_user_by_email(DEMO_EMAIL)
    if not user:
        user = await repo.create_user({
            "username": "Asha",
            "email": DEMO_EMAIL,
            "password": hash_password("asha123"),
            "location": {"city": "Pune", "state": "Maharashtra"},
            "profile_picture": None,
        })

    soon = datetime.now(timezone.utc) + timedelta(days=2)
    food = await repo.insert_donation("food", {
        "user_id": user["id"],
        "name": "Asha",
        "email": DEMO_EMAIL,
        "contact_number": "9000000001",
        "address": {"street": "FC Road", "city": "Pune", "state": "Maharashtra",
                    "postal_code": "411004", "country": "India"},
        "location": {"latitude": 18.5204, "longitude": 73.8567, "city": "Pune", "state": "Maharashtra"},
        "food_items": [{"type": "Cooked", "name": "Veg biryani", "quantity": 10, "unit": "plates",
                        "expiry_date": soon}],
        "available_until": soon,
        "donation_type": "free",
        "price": None,
    })
    non_food = await repo.insert_donation("non_food", {
        "user_id": user["id"],
        "name": "Asha",
        "email": DEMO_EMAIL,
        "contact_number": "9000000001",
        "location": {"latitude": 18.5314, "longitude": 73.8446},
        "address": None,
        "non_food_items": [{"type": "Clothing", "name": "Winter jackets", "condition": "Used",
                            "quantity": 4, "price": None}],
        "available_until": soon + timedelta(days=14),
        "donation_type": "free",
        "price": None,
    })
    print("Seeded:", user["email"], food["id"], non_food["id"])


if __name__ == "__main__":
    asyncio.run(main())
