from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from agromarket import crud, models
from agromarket.crop_service import CropService
from agromarket.db import Base


def crop_fields(farmer_id: str, **overrides) -> dict:
    data = {
        "farmer_id": farmer_id,
        "farmer_name": "Ravi",
        "name": "Red Onions",
        "type": "Onion",
        "image_url": "https://img.example/onion.jpg",
        "latitude": 20.1,
        "longitude": 74.2,
        "address": "Village Lasalgaon, Nashik",
        "harvest_date": "2025-05-01",
        "quantity": 250.0,
        "unit": "quintal",
        "price_per_unit": 1500.0,
        "published": True,
        "views": 0,
        "orders": 0,
    }
    data.update(overrides)
    return data


def order_fields(crop: models.Crop, customer_id: str, status: str, **overrides) -> dict:
    data = {
        "customer_id": customer_id,
        "customer_name": "Asha",
        "customer_email": "",
        "farmer_id": crop.farmer_id,
        "farmer_name": crop.farmer_name,
        "crop_id": crop.id,
        "crop_name": crop.name,
        "crop_image": crop.image_url,
        "quantity": 1.0,
        "price_per_unit": crop.price_per_unit,
        "total_price": crop.price_per_unit,
        "delivery_address": "x",
        "status": status,
    }
    data.update(overrides)
    return data


@pytest.fixture(scope="function")
def db_session():
    """Fresh in-memory SQLite session per test."""
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def test_get_user_handles_missing_and_empty_ids(db_session):
    user = crud.insert_user(db_session, name="Ravi", email=None)
    db_session.commit()

    assert crud.get_user(db_session, user.id) is user
    assert crud.get_user(db_session, "nobody") is None
    assert crud.get_user(db_session, None) is None
    assert crud.get_user(db_session, "") is None


def test_lookups_filter_by_owner_and_publication(db_session):
    a = crud.insert_user(db_session, name="A", email=None)
    b = crud.insert_user(db_session, name="B", email=None)
    t0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
    crud.insert_crop(db_session, crop_fields(a.id, name="A-pub", created_at=t0))
    crud.insert_crop(db_session, crop_fields(a.id, name="A-draft", published=False, created_at=t0 + timedelta(minutes=1)))
    crud.insert_crop(db_session, crop_fields(b.id, name="B-pub", created_at=t0 + timedelta(minutes=2)))
    db_session.commit()

    assert [c.name for c in crud.crops_by_farmer(db_session, a.id)] == ["A-pub", "A-draft"]
    assert [c.name for c in crud.published_crops(db_session)] == ["A-pub", "B-pub"]


def test_count_active_orders_ignores_terminal_statuses(db_session):
    farmer = crud.insert_user(db_session, name="F", email=None)
    customer = crud.insert_user(db_session, name="C", email=None)
    crop = crud.insert_crop(db_session, crop_fields(farmer.id))
    for status in ("pending", "shipped", "delivered", "cancelled"):
        crud.insert_order(db_session, order_fields(crop, customer.id, status))
    db_session.commit()

    assert crud.count_active_orders_for_crop(db_session, crop.id) == 2
    assert len(crud.orders_by_customer(db_session, customer.id)) == 4
    assert len(crud.orders_by_farmer(db_session, farmer.id)) == 4


def test_increment_counter_reports_missing_rows_and_rejects_unknown_columns(db_session):
    farmer = crud.insert_user(db_session, name="F", email=None)
    crop = crud.insert_crop(db_session, crop_fields(farmer.id))
    db_session.commit()

    assert crud.increment_crop_counter(db_session, crop.id, "orders") is True
    assert crud.increment_crop_counter(db_session, "missing", "orders") is False
    with pytest.raises(ValueError):
        crud.increment_crop_counter(db_session, crop.id, "price_per_unit")
    db_session.commit()

    assert db_session.get(models.Crop, crop.id).orders == 1


def test_farmer_id_is_immutable(db_session):
    farmer = crud.insert_user(db_session, name="F", email=None)
    other = crud.insert_user(db_session, name="O", email=None)
    crop = crud.insert_crop(db_session, crop_fields(farmer.id))

    with pytest.raises(ValueError):
        crud.patch(crop, {"farmer_id": other.id})


def test_concurrent_view_increments_are_not_lost(tmp_path):
    """N threads, each with its own session, add exactly N views."""
    engine = create_engine(
        f"sqlite:///{(tmp_path / 'views.db').as_posix()}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SessionFactory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    with SessionFactory() as db:
        farmer = crud.insert_user(db, name="F", email=None)
        crop_id = crud.insert_crop(db, crop_fields(farmer.id)).id
        db.commit()

    svc = CropService()
    n = 40

    def bump(_):
        with SessionFactory() as db:
            svc.increment_views(db, crop_id)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(bump, range(n)))

    with SessionFactory() as db:
        assert db.get(models.Crop, crop_id).views == n
    engine.dispose()
