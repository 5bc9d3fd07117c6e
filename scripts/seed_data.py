import argparse
import logging

from sqlalchemy import delete, select

from merchant_dashboard.core.logging import setup_logging
from merchant_dashboard.database import Base, engine, session_scope
from merchant_dashboard.models import (
    Inventory,
    InventoryTransaction,
    Product,
    Store,
    StoreBranch,
    import_all_models,
)

logger = logging.getLogger("seed_data")


def parse_args():
    parser = argparse.ArgumentParser(description="Seed a demo store with branches and stock.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data before seeding.",
    )
    parser.add_argument("--store-name", default="Demo Store", help="Name of the seeded store.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run.")
    return parser.parse_args()


def clear_data(db):
    # Children first; SQLite only cascades when foreign keys are enabled.
    for model in (InventoryTransaction, Inventory, Product, StoreBranch, Store):
        db.execute(delete(model))


def seed_store(db, store_name):
    store = Store(id=1, name=store_name)
    db.add(store)
    db.flush()

    main_branch = StoreBranch(
        store_id=store.id,
        name="Main",
        name_ar="الرئيسي",
        is_main_branch=True,
    )
    east_branch = StoreBranch(store_id=store.id, name="East", name_ar="الشرق", city="Riyadh")
    db.add_all([main_branch, east_branch])
    db.flush()

    coffee = Product(
        store_id=store.id,
        name_en="Arabic Coffee 250g",
        name_ar="قهوة عربية",
        sku="COF-250",
        price=35.0,
    )
    dates = Product(
        store_id=store.id,
        name_en="Dates Box",
        name_ar="علبة تمر",
        sku="DAT-1KG",
        price=60.0,
        low_stock_threshold=5,
        selling_method="weight",
        selling_unit="kg",
    )
    gift_card = Product(
        store_id=store.id,
        name_en="Gift Card",
        sku="GFT-100",
        price=100.0,
        track_inventory=False,
    )
    db.add_all([coffee, dates, gift_card])
    db.flush()

    stock = [
        (coffee, main_branch, 40, 4),
        (dates, main_branch, 5, 0),
        (coffee, east_branch, 0, 0),
    ]
    for product, branch, quantity, reserved in stock:
        db.add(
            Inventory(
                product_id=product.id,
                branch_id=branch.id,
                store_id=store.id,
                quantity=quantity,
                reserved_quantity=reserved,
                available_quantity=quantity - reserved,
            )
        )
    return store


def main():
    args = parse_args()
    setup_logging(args.log_level)

    import_all_models()
    Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        if args.reset:
            clear_data(db)
            logger.info("Existing data cleared.")

        if db.execute(select(Store.id).limit(1)).first():
            logger.info("Seed skipped: stores already exist.")
            return

        store = seed_store(db, args.store_name)
        logger.info("Seed data created.", extra={"store_id": store.id})


if __name__ == "__main__":
    main()
