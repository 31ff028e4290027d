# agromarket/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, Integer, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.orm import validates

from .db import Base


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True, index=True)
    role = Column(String, nullable=True)                       # set once
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Crop(Base):
    __tablename__ = "crops"

    id = Column(String, primary_key=True, default=_new_id)
    farmer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    farmer_name = Column(String, nullable=False)               # snapshot at creation

    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    image_url = Column(String, nullable=False)
    images = Column(JSON, nullable=True)                       # [{"url": ..., "uploaded_at": ...}]

    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(String, nullable=False)

    harvest_date = Column(String, nullable=False)              # YYYY-MM-DD
    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=False)
    price_per_unit = Column(Float, nullable=False)
    disease_analysis = Column(JSON, nullable=True)

    published = Column(Boolean, nullable=False, default=False, index=True)
    views = Column(Integer, nullable=False, default=0)
    orders = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    @property
    def location(self) -> dict:
        return {"lat": self.latitude, "lng": self.longitude, "address": self.address}

    @validates("farmer_id")
    def _immutable_owner(self, key, v):
        if self.farmer_id is not None and v != self.farmer_id:
            raise ValueError("farmer_id cannot be changed")
        return v


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=_new_id)

    customer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False, default="")

    farmer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    farmer_name = Column(String, nullable=False)

    # plain reference; the order keeps its snapshot after the crop is gone
    crop_id = Column(String, nullable=False, index=True)
    crop_name = Column(String, nullable=False)
    crop_image = Column(String, nullable=False)

    quantity = Column(Float, nullable=False)
    price_per_unit = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    delivery_address = Column(String, nullable=False)

    status = Column(String, nullable=False, default="pending", index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    @validates("created_at")
    def _tz(self, _, v):
        # ensure aware timestamps
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)
