# agromarket/schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime

from agromarket.utils import to_calendar_date

Role = Literal["admin", "user", "member", "farmer", "customer"]
OrderStatus = Literal["pending", "confirmed", "shipped", "delivered", "cancelled"]


class Location(BaseModel):
    lat: float = Field(..., allow_inf_nan=False)
    lng: float = Field(..., allow_inf_nan=False)
    address: str


class CropImage(BaseModel):
    url: str
    uploaded_at: float = Field(..., allow_inf_nan=False)  # epoch millis


class DiseaseAnalysis(BaseModel):
    is_healthy: bool
    disease_name: Optional[str] = None
    confidence: Optional[float] = Field(None, allow_inf_nan=False)
    remedy: Optional[str] = None


# ---------- users ----------

class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class RoleSelection(BaseModel):
    role: Role


class UserOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None

    class Config:
        from_attributes = True


# ---------- crops ----------

class CropBase(BaseModel):
    name: str
    type: str
    image_url: str
    images: Optional[List[CropImage]] = None
    location: Location
    harvest_date: str
    quantity: float = Field(..., ge=0, allow_inf_nan=False)
    unit: str
    price_per_unit: float = Field(..., ge=0, allow_inf_nan=False)
    disease_analysis: Optional[DiseaseAnalysis] = None
    published: bool

    @field_validator("harvest_date")
    @classmethod
    def _calendar_date(cls, v: str) -> str:
        return to_calendar_date(v)


class CropCreate(CropBase):
    pass


class CropUpdate(BaseModel):
    """Partial update; only fields that were sent are applied."""
    name: Optional[str] = None
    type: Optional[str] = None
    image_url: Optional[str] = None
    location: Optional[Location] = None
    harvest_date: Optional[str] = None
    quantity: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    unit: Optional[str] = None
    price_per_unit: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    published: Optional[bool] = None

    @field_validator("harvest_date")
    @classmethod
    def _calendar_date(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else to_calendar_date(v)


class PublishToggle(BaseModel):
    published: bool


class CropOut(CropBase):
    id: str
    farmer_id: str
    farmer_name: str
    views: int
    orders: int
    created_at: datetime

    class Config:
        from_attributes = True


# ---------- orders ----------

class OrderCreate(BaseModel):
    crop_id: str
    quantity: float = Field(..., allow_inf_nan=False)
    total_price: float = Field(..., allow_inf_nan=False)
    delivery_address: str = Field(..., min_length=1)


class StatusUpdate(BaseModel):
    status: OrderStatus


class OrderOut(BaseModel):
    id: str
    customer_id: str
    customer_name: str
    customer_email: str
    farmer_id: str
    farmer_name: str
    crop_id: str
    crop_name: str
    crop_image: str
    quantity: float
    price_per_unit: float
    total_price: float
    delivery_address: str
    status: OrderStatus
    created_at: datetime

    class Config:
        from_attributes = True


# ---------- dashboards ----------

class FarmerStats(BaseModel):
    total_crops: int = 0
    published_crops: int = 0
    total_views: int = 0
    total_orders: int = 0


class CustomerStats(BaseModel):
    total_orders: int = 0
    pending_orders: int = 0
    total_spent: float = 0.0


class CreatedId(BaseModel):
    id: str


class AnalysisOut(BaseModel):
    disease_analysis: DiseaseAnalysis
    location: Location
