# agromarket/crop_service.py
from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from agromarket import crud, models, schemas
from agromarket.analysis import jitter_location, mock_disease_analysis
from agromarket.errors import Conflict, NotAuthorized
from agromarket.permissions import require_farmer_owner, require_found, require_principal, require_role
from agromarket.seed import build_seed_payloads
from agromarket.utils import get_logger, to_aware_utc

Clock = Callable[[], datetime]

logger = get_logger(__name__)


def _split_location(data: Dict[str, Any]) -> Dict[str, Any]:
    loc = data.pop("location", None)
    if loc is not None:
        data["latitude"] = loc["lat"]
        data["longitude"] = loc["lng"]
        data["address"] = loc["address"]
    return data


def _is_healthy(crop: models.Crop) -> bool:
    return bool(crop.disease_analysis and crop.disease_analysis.get("is_healthy"))


def filter_and_sort(
    crops: List[models.Crop],
    *,
    search: Optional[str] = None,
    health: str = "all",
    sort: Optional[str] = None,
) -> List[models.Crop]:
    """Marketplace browse filters, applied in memory on an already-fetched list."""
    out = list(crops)

    if search:
        needle = search.strip().lower()
        out = [
            c for c in out
            if needle in c.name.lower() or needle in c.farmer_name.lower() or needle in c.address.lower()
        ]

    if health == "healthy":
        out = [c for c in out if _is_healthy(c)]
    elif health == "diseased":
        out = [c for c in out if not _is_healthy(c)]

    if sort == "price_low":
        out.sort(key=lambda c: c.price_per_unit)
    elif sort == "price_high":
        out.sort(key=lambda c: c.price_per_unit, reverse=True)
    elif sort == "newest":
        out.sort(key=lambda c: to_aware_utc(c.created_at), reverse=True)
    return out


class CropService:
    def __init__(self, *, clock: Clock | None = None, rng: random.Random | None = None):
        # DI
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._rng = rng or random.Random()

    # ---------- mutations ----------

    def create_crop(self, db: Session, principal: Optional[models.User], payload: schemas.CropCreate) -> str:
        user = require_role(principal, "farmer")
        obj = self._insert(db, user, payload, farmer_name=user.name or "Anonymous Farmer")
        db.commit()
        logger.info("crop %s created by farmer %s", obj.id, user.id)
        return obj.id

    def update_crop(
        self,
        db: Session,
        principal: Optional[models.User],
        crop_id: str,
        updates: schemas.CropUpdate,
    ) -> str:
        obj = self._owned_crop(db, principal, crop_id)
        fields = _split_location(updates.model_dump(exclude_unset=True, exclude_none=True))
        crud.patch(obj, fields)
        db.commit()
        logger.info("crop %s updated: %s", crop_id, sorted(fields))
        return crop_id

    def set_published(self, db: Session, principal: Optional[models.User], crop_id: str, published: bool) -> str:
        obj = self._owned_crop(db, principal, crop_id)
        obj.published = published
        db.commit()
        logger.info("crop %s published=%s", crop_id, published)
        return crop_id

    def delete_crop(self, db: Session, principal: Optional[models.User], crop_id: str) -> None:
        obj = self._owned_crop(db, principal, crop_id)
        active = crud.count_active_orders_for_crop(db, crop_id)
        if active:
            logger.warning("refusing to delete crop %s with %d active orders", crop_id, active)
            raise Conflict(
                "Crop has active orders; cancel or deliver them first",
                {"id": crop_id, "active_orders": active},
            )
        crud.delete(db, obj)
        db.commit()
        logger.info("crop %s deleted", crop_id)

    def increment_views(self, db: Session, crop_id: str) -> None:
        if crud.increment_crop_counter(db, crop_id, "views"):
            db.commit()
        else:
            db.rollback()

    def seed_crops(self, db: Session, principal: Optional[models.User]) -> int:
        user = require_role(principal, "farmer", "admin")
        payloads = build_seed_payloads(to_aware_utc(self._clock()).date(), self._rng)
        for payload in payloads:
            self._insert(db, user, payload, farmer_name=user.name or "Demo Farmer")
        db.commit()
        logger.info("seeded %d crops for %s", len(payloads), user.id)
        return len(payloads)

    def analyze(self, address: str) -> schemas.AnalysisOut:
        """Mock health check plus a jittered coordinate for a new listing."""
        return schemas.AnalysisOut(
            disease_analysis=mock_disease_analysis(self._rng),
            location=jitter_location(address, self._rng),
        )

    # ---------- queries ----------

    def get_farmer_crops(self, db: Session, principal: Optional[models.User]) -> List[models.Crop]:
        if principal is None:
            return []
        return crud.crops_by_farmer(db, principal.id)

    def get_marketplace_crops(
        self,
        db: Session,
        crop_type: Optional[str] = None,
        *,
        search: Optional[str] = None,
        health: str = "all",
        sort: Optional[str] = None,
    ) -> List[models.Crop]:
        crops = crud.published_crops(db)
        if crop_type and crop_type != "all":
            crops = [c for c in crops if c.type == crop_type]
        return filter_and_sort(crops, search=search, health=health, sort=sort)

    def get_crop(self, db: Session, crop_id: str) -> models.Crop:
        return require_found(crud.get_crop(db, crop_id), "Crop", crop_id)

    def farmer_stats(self, db: Session, principal: Optional[models.User]) -> schemas.FarmerStats:
        if principal is None:
            return schemas.FarmerStats()
        crops = crud.crops_by_farmer(db, principal.id)
        return schemas.FarmerStats(
            total_crops=len(crops),
            published_crops=sum(1 for c in crops if c.published),
            total_views=sum(c.views or 0 for c in crops),
            total_orders=len(crud.orders_by_farmer(db, principal.id)),
        )

    # ---------- helpers ----------

    def _insert(self, db: Session, user: models.User, payload: schemas.CropCreate, *, farmer_name: str) -> models.Crop:
        fields = _split_location(payload.model_dump())
        fields.update(
            farmer_id=user.id,
            farmer_name=farmer_name,
            views=0,
            orders=0,
            created_at=to_aware_utc(self._clock()),
        )
        return crud.insert_crop(db, fields)

    def _owned_crop(self, db: Session, principal: Optional[models.User], crop_id: str) -> models.Crop:
        user = require_principal(principal)
        obj = require_found(crud.get_crop(db, crop_id), "Crop", crop_id)
        try:
            return require_farmer_owner(obj, user)
        except NotAuthorized:
            logger.warning("user %s denied access to crop %s", user.id, crop_id)
            raise
