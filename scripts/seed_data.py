import argparse
from datetime import timedelta

from sqlalchemy import delete, select

from stockledger.core.dates import utc_now
from stockledger.core.logging import setup_logging
from stockledger.database import Base, engine, session_scope
from stockledger.models import (
    Category,
    Item,
    ItemDetails,
    StockBatch,
    StockOutTransaction,
    User,
    import_all_models,
)
from stockledger.services.batch_service import create_batch
from stockledger.services.category_service import list_categories
from stockledger.services.fifo_allocator import allocate_stock_out
from stockledger.services.item_service import create_item, create_item_details
from stockledger.services.user_service import create_user

DEMO_EMAIL = "demo@stockledger.local"


def parse_args():
    parser = argparse.ArgumentParser(description="Seed a demo business with stock history.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        if args.reset:
            for model in (StockOutTransaction, StockBatch, ItemDetails, Item, Category, User):
                db.execute(delete(model))
            db.commit()

        has_user = db.execute(select(User.id).where(User.email == DEMO_EMAIL)).first()
        if has_user:
            print("Seed skipped: demo user already exists.")
            return

        user = create_user(
            db,
            email=DEMO_EMAIL,
            business_name="Demo Kitchen",
            business_type="restaurant",
            country="malaysia",
            plan="stock & cost",
            permitted=True,
        )
        categories = {category.name: category for category in list_categories(db, user_id=user.id)}

        item = create_item(
            db,
            user_id=user.id,
            name="Chicken Breast",
            barcode="9555000000011",
            category_id=categories["Meats"].id,
            price="12.50",
        )
        create_item_details(
            db,
            item_id=item.id,
            package_type="carton",
            measure="kg",
            package_weight="10",
            storage_location="Freezer A",
            stock_on_hand="4",
        )

        start = utc_now() - timedelta(days=14)
        create_batch(db, item_id=item.id, user_id=user.id, quantity="10", unit_price="2.00", created_at=start)
        create_batch(
            db,
            item_id=item.id,
            user_id=user.id,
            quantity="5",
            unit_price="3.00",
            created_at=start + timedelta(days=3),
        )
        allocate_stock_out(
            db,
            item_id=item.id,
            user_id=user.id,
            quantity="12",
            occurred_at=start + timedelta(days=7),
        )
        print("Seed data created for user {} (item {}).".format(user.id, item.id))


if __name__ == "__main__":
    main()
