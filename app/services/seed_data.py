"""
Database Seed Script.

Seeds a small Colaba (400001) neighbourhood for the demo:
1. Customers  – Raj Sharma (400001), Priya Patel (400002)
2. Merchants  – Suresh Gupta, Kavita Singh
3. Bundle     – "Colaba Business Circle"
4. Businesses – Fresh Mart Grocery (kirana, 8%), Style Corner Electronics (5%)
5. Ledger     – a few purchases, a top-up, a redemption and two ratings

Everything goes through the account, business and ledger services, so the
seeded balances obey the same invariants as live traffic.
"""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from app.models.business import Bundle
from app.models.enums import BusinessCategory, UserType
from app.services.accounts import AccountService
from app.services.accrual_engine import LedgerEngine
from app.services.businesses import BusinessService
from app.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

CUSTOMERS = [
    {
        "email": "customer1@example.com",
        "name": "Raj Sharma",
        "pincode": "400001",
        "phone": "+91-9876543210",
    },
    {
        "email": "customer2@example.com",
        "name": "Priya Patel",
        "pincode": "400002",
        "phone": "+91-9876543211",
    },
]

MERCHANTS = [
    {
        "email": "merchant1@example.com",
        "name": "Suresh Gupta",
        "pincode": "400001",
        "business": {
            "business_name": "Fresh Mart Grocery",
            "owner_name": "Suresh Gupta",
            "category": BusinessCategory.KIRANA.value,
            "pincode": "400001",
            "address": "Shop 1, Colaba Market, Mumbai",
            "description": "Fresh groceries and daily essentials",
            "b_coin_rate": Decimal("8.00"),
        },
    },
    {
        "email": "merchant2@example.com",
        "name": "Kavita Singh",
        "pincode": "400001",
        "business": {
            "business_name": "Style Corner Electronics",
            "owner_name": "Kavita Singh",
            "category": BusinessCategory.ELECTRONICS.value,
            "pincode": "400001",
            "address": "Shop 5, Colaba Main Road, Mumbai",
            "description": "Latest electronics and gadgets",
            "b_coin_rate": Decimal("5.00"),
        },
    },
]


def seed_database(db: Session) -> None:
    """
    Seeds the demo neighbourhood.
    Skips seeding if users already exist.
    """
    store = LedgerStore(db)
    existing = store.count_users()
    if existing > 0:
        logger.info(f"Database already has {existing} users, skipping seed")
        return

    logger.info("Seeding database with the Colaba demo neighbourhood...")
    accounts = AccountService(store)
    businesses = BusinessService(store)
    engine = LedgerEngine(store)

    customers = []
    for config in CUSTOMERS:
        user, _ = accounts.register(
            password=DEMO_PASSWORD,
            user_type=UserType.CUSTOMER.value,
            **config,
        )
        customers.append(user)

    store.add(Bundle(
        name="Colaba Business Circle",
        pincode="400001",
        description="Premium business bundle in Colaba area",
    ))
    store.commit()

    shops = []
    for config in MERCHANTS:
        profile = dict(config)
        business_fields = profile.pop("business")
        owner, _ = accounts.register(
            password=DEMO_PASSWORD,
            user_type=UserType.BUSINESS.value,
            **profile,
        )
        business, _ = businesses.create(owner.id, **business_fields)
        shops.append(business)

    raj, priya = customers
    grocery, electronics = shops

    engine.earn(raj.id, grocery.id, "500.00", idempotency_key="seed-raj-grocery")
    engine.earn(raj.id, electronics.id, "300.00", idempotency_key="seed-raj-electronics")
    engine.credit(
        priya.id, grocery.id, "50.00",
        description="Welcome bonus", idempotency_key="seed-priya-welcome",
    )
    engine.redeem(priya.id, grocery.id, "20.00", idempotency_key="seed-priya-redeem")

    engine.rate(raj.id, grocery.id, 5, comment="Excellent fresh products and great service!")
    engine.rate(priya.id, electronics.id, 4, comment="Good variety of electronics, helpful staff.")

    logger.info(
        "Database seeded successfully: %d customers, %d businesses",
        len(customers), len(shops),
    )
