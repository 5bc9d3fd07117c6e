from types import SimpleNamespace

from sqlalchemy.orm import sessionmaker

from merchant_dashboard.database import Base, build_engine
from merchant_dashboard.models import Inventory, Product, Store, StoreBranch, import_all_models


def make_session(tables=None):
    import_all_models()
    engine = build_engine("sqlite://")
    if tables is None:
        Base.metadata.create_all(bind=engine)
    else:
        Base.metadata.create_all(bind=engine, tables=[model.__table__ for model in tables])
    Session = sessionmaker(bind=engine, expire_on_commit=False)
    return Session()


def seed_store(db, *, main_quantity=5, threshold=None):
    """Store 1 with Main and East branches and one product stocked at Main only."""
    store = Store(id=1, name="Demo Store")
    db.add(store)
    db.flush()

    main = StoreBranch(store_id=1, name="Main", is_main_branch=True)
    east = StoreBranch(store_id=1, name="East", name_ar="الشرق")
    db.add_all([main, east])
    db.flush()

    product = Product(
        store_id=1,
        name_en="Arabic Coffee",
        name_ar="قهوة عربية",
        sku="COF-250",
        price=35.0,
        low_stock_threshold=threshold,
    )
    db.add(product)
    db.flush()

    db.add(
        Inventory(
            product_id=product.id,
            branch_id=main.id,
            store_id=1,
            quantity=main_quantity,
            reserved_quantity=0,
            available_quantity=main_quantity,
        )
    )
    db.commit()
    return SimpleNamespace(store=store, main=main, east=east, product=product)


def branch(branch_id, name, *, is_main=False, name_ar=None):
    return SimpleNamespace(id=branch_id, name=name, name_ar=name_ar, is_main_branch=is_main)


def row(product_id, branch_id, quantity, *, reserved=0, available=None, row_id=None):
    return SimpleNamespace(
        id=row_id,
        product_id=product_id,
        branch_id=branch_id,
        quantity=quantity,
        reserved_quantity=reserved,
        available_quantity=quantity - reserved if available is None else available,
    )


def product(product_id, name, *, threshold=None, track_inventory=True, name_ar=None):
    return SimpleNamespace(
        id=product_id,
        name_en=name,
        name_ar=name_ar,
        sku=None,
        image_url=None,
        is_available=True,
        low_stock_threshold=threshold,
        track_inventory=track_inventory,
        selling_method="unit",
        selling_unit=None,
    )
