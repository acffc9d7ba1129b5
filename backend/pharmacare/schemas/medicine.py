from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date
from decimal import Decimal


class MedicineCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    manufacturer: str = ""
    price: Decimal = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    expiry_date: Optional[date] = None
    category: str = "General"
    barcode: Optional[str] = Field(default=None, max_length=32)
    image_url: Optional[str] = None


class MedicineUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    manufacturer: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    expiry_date: Optional[date] = None
    category: Optional[str] = None
    barcode: Optional[str] = Field(default=None, max_length=32)
    image_url: Optional[str] = None

    @field_validator("name", "manufacturer", "price", "stock", "category")
    @classmethod
    def required_not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class MedicineResponse(BaseModel):
    id: int
    name: str
    manufacturer: str
    price: Decimal
    stock: int
    expiry_date: Optional[date] = None
    category: str
    barcode: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class StockAdjustment(BaseModel):
    delta: int
    reason: str = "manual adjustment"
