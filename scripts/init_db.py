"""
Initialize database, run migrations and seed reference data. Run from project root: python -m scripts.init_db
"""
import os
import sys
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rentclub.core.config import settings
from rentclub.core.database import SessionLocal
from rentclub.core.db_transaction import db_transaction
from rentclub.models import GeneralVariable, Tier
from alembic.config import Config
from alembic import command

DEFAULT_TIERS = [
    # (tier_name, commission %, active direct referrals required)
    (settings.DEFAULT_TIER_NAME, Decimal("10"), 0),
    ("Tier 2", Decimal("12.5"), 5),
    ("Tier 3", Decimal("15"), 15),
]


def seed_reference_data():
    """Insert the default tiers and membership price when missing. Existing rows are left alone."""
    with db_transaction() as db:
        for tier_name, commission, min_referrals in DEFAULT_TIERS:
            if not db.query(Tier).filter(Tier.tier_name == tier_name).first():
                db.add(Tier(tier_name=tier_name, commission=commission, min_referrals=min_referrals))
                print(f"Added tier {tier_name} ({commission}%, {min_referrals} referrals)")
        price = db.query(GeneralVariable).filter(
            GeneralVariable.variable_name == settings.MEMBERSHIP_PRICE_VARIABLE
        ).first()
        if price is None:
            db.add(GeneralVariable(
                variable_name=settings.MEMBERSHIP_PRICE_VARIABLE,
                variable_value=str(settings.DEFAULT_MEMBERSHIP_PRICE),
                variable_type="number",
            ))
            print(f"Added {settings.MEMBERSHIP_PRICE_VARIABLE} = {settings.DEFAULT_MEMBERSHIP_PRICE}")


def init_db():
    """Initialize database and run all migrations."""
    # Ensure database directory exists
    os.makedirs(os.path.dirname(settings.DATABASE_PATH) or ".", exist_ok=True)

    # Run Alembic migrations
    alembic_cfg = Config(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "alembic.ini"))

    print("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    seed_reference_data()
    print(f"Database initialized and migrations applied at {settings.DATABASE_PATH}")


if __name__ == "__main__":
    init_db()
