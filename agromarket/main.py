from fastapi import FastAPI, Depends, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import List, Literal, Optional
from sqlalchemy.orm import Session

from agromarket import models, schemas, user_service
from agromarket.crop_service import CropService
from agromarket.db import Base, engine, get_db
from agromarket.deps import get_crop_service, get_order_service, get_principal
from agromarket.errors import MarketplaceError, NotAuthenticated
from agromarket.order_service import OrderService
from agromarket.utils import get_logger

logger = get_logger("agromarket.api")

app = FastAPI(title="Crop Marketplace API")

# Create tables at startup
@app.on_event("startup")
def _init_db():
    Base.metadata.create_all(bind=engine)

@app.exception_handler(MarketplaceError)
async def _marketplace_error(request: Request, exc: MarketplaceError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc.message)
    content = {"detail": exc.message, "error": type(exc).__name__}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)

@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    # rejected input is not echoed back; it may not be JSON-encodable (NaN, Infinity)
    errors = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
    logger.warning("%s %s -> validation failed: %d error(s)", request.method, request.url.path, len(errors))
    return JSONResponse(status_code=422, content={"detail": errors})

@app.get("/health")
def health():
    return {"status": "ok"}

# ---------- users ----------

@app.post("/users", response_model=schemas.UserOut, status_code=201)
def register_user(payload: schemas.UserCreate, db: Session = Depends(get_db)):
    return user_service.register_user(db, name=payload.name, email=payload.email)

@app.get("/users/me", response_model=schemas.UserOut)
def read_me(principal: Optional[models.User] = Depends(get_principal)):
    user = user_service.get_current_user(principal)
    if user is None:
        raise NotAuthenticated("Not authenticated")
    return user

@app.post("/users/me/role", response_model=schemas.UserOut)
def select_role(
    payload: schemas.RoleSelection,
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
):
    return user_service.set_user_role(db, principal, payload.role)

# ---------- crops ----------

@app.post("/crops", response_model=schemas.CreatedId, status_code=201)
def create_crop(
    payload: schemas.CropCreate,
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: CropService = Depends(get_crop_service),
):
    return {"id": svc.create_crop(db, principal, payload)}

@app.get("/crops/mine", response_model=List[schemas.CropOut])
def farmer_crops(
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: CropService = Depends(get_crop_service),
):
    return svc.get_farmer_crops(db, principal)

@app.get("/crops/marketplace", response_model=List[schemas.CropOut])
def marketplace_crops(
    crop_type: Optional[str] = None,
    search: Optional[str] = None,
    health: Literal["all", "healthy", "diseased"] = "all",
    sort: Optional[Literal["newest", "price_low", "price_high"]] = None,
    db: Session = Depends(get_db),
    svc: CropService = Depends(get_crop_service),
):
    return svc.get_marketplace_crops(db, crop_type, search=search, health=health, sort=sort)

@app.post("/crops/analyze", response_model=schemas.AnalysisOut)
def analyze_crop(
    address: str = "",
    principal: Optional[models.User] = Depends(get_principal),
    svc: CropService = Depends(get_crop_service),
):
    if principal is None:
        raise NotAuthenticated("Not authenticated")
    return svc.analyze(address)

@app.post("/crops/seed")
def seed_crops(
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: CropService = Depends(get_crop_service),
):
    return {"seeded": svc.seed_crops(db, principal)}

@app.get("/crops/{crop_id}", response_model=schemas.CropOut)
def get_crop(crop_id: str, db: Session = Depends(get_db), svc: CropService = Depends(get_crop_service)):
    return svc.get_crop(db, crop_id)

@app.patch("/crops/{crop_id}", response_model=schemas.CropOut)
def update_crop(
    crop_id: str,
    payload: schemas.CropUpdate,
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: CropService = Depends(get_crop_service),
):
    svc.update_crop(db, principal, crop_id, payload)
    return svc.get_crop(db, crop_id)

@app.post("/crops/{crop_id}/publish", response_model=schemas.CropOut)
def publish_crop(
    crop_id: str,
    payload: schemas.PublishToggle,
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: CropService = Depends(get_crop_service),
):
    svc.set_published(db, principal, crop_id, payload.published)
    return svc.get_crop(db, crop_id)

@app.delete("/crops/{crop_id}", status_code=204)
def delete_crop(
    crop_id: str,
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: CropService = Depends(get_crop_service),
):
    svc.delete_crop(db, principal, crop_id)
    return Response(status_code=204)

@app.post("/crops/{crop_id}/views", status_code=204)
def record_view(crop_id: str, db: Session = Depends(get_db), svc: CropService = Depends(get_crop_service)):
    svc.increment_views(db, crop_id)
    return Response(status_code=204)

# ---------- orders ----------

@app.post("/orders", response_model=schemas.CreatedId, status_code=201)
def create_order(
    payload: schemas.OrderCreate,
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: OrderService = Depends(get_order_service),
):
    order_id = svc.create_order(
        db,
        principal,
        payload.crop_id,
        payload.quantity,
        payload.total_price,
        payload.delivery_address,
    )
    return {"id": order_id}

@app.get("/orders/mine", response_model=List[schemas.OrderOut])
def customer_orders(
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: OrderService = Depends(get_order_service),
):
    return svc.get_customer_orders(db, principal)

@app.get("/orders/incoming", response_model=List[schemas.OrderOut])
def farmer_orders(
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: OrderService = Depends(get_order_service),
):
    return svc.get_farmer_orders(db, principal)

@app.get("/orders/{order_id}", response_model=schemas.OrderOut)
def get_order(
    order_id: str,
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: OrderService = Depends(get_order_service),
):
    return svc.get_order(db, principal, order_id)

@app.patch("/orders/{order_id}/status", response_model=schemas.OrderOut)
def update_order_status(
    order_id: str,
    payload: schemas.StatusUpdate,
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: OrderService = Depends(get_order_service),
):
    return svc.update_order_status(db, principal, order_id, payload.status)

# ---------- dashboards ----------

@app.get("/stats/farmer", response_model=schemas.FarmerStats)
def farmer_stats(
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: CropService = Depends(get_crop_service),
):
    return svc.farmer_stats(db, principal)

@app.get("/stats/customer", response_model=schemas.CustomerStats)
def customer_stats(
    db: Session = Depends(get_db),
    principal: Optional[models.User] = Depends(get_principal),
    svc: OrderService = Depends(get_order_service),
):
    return svc.customer_stats(db, principal)
