from pydantic import BaseModel, Field
from typing import List, Literal, Optional
import datetime as dt
from decimal import Decimal

PurchaseStatus = Literal["pending", "received", "cancelled"]


class SaleCreate(BaseModel):
    """Manual sale entry. Unit price defaults to the catalog price."""
    medicine_id: int
    quantity: int = Field(gt=0)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    customer_id: Optional[int] = None


class SaleResponse(BaseModel):
    id: int
    medicine_id: int
    customer_id: Optional[int] = None
    quantity: int
    unit_price: Decimal
    total_amount: Decimal
    status: str
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class PurchaseCreate(BaseModel):
    medicine_id: int
    supplier_id: int
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(gt=0)
    invoice_number: Optional[str] = None
    date: Optional[dt.date] = None
    status: PurchaseStatus = "pending"


class PurchaseStatusUpdate(BaseModel):
    status: PurchaseStatus


class PurchaseResponse(BaseModel):
    id: int
    medicine_id: int
    supplier_id: int
    quantity: int
    unit_price: Decimal
    total_amount: Decimal
    invoice_number: str
    date: dt.date
    status: str
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class CartLineResponse(BaseModel):
    medicine_id: int
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal

    class Config:
        from_attributes = True


class CartResponse(BaseModel):
    state: str
    lines: List[CartLineResponse] = []
    total: Decimal
    item_count: int


class CartAdd(BaseModel):
    medicine_id: int


class BarcodeScan(BaseModel):
    code: str


class QuantityChange(BaseModel):
    delta: int


class CheckoutConfirm(BaseModel):
    customer_id: Optional[int] = None


class FailedLineResponse(BaseModel):
    medicine_id: int
    name: str
    quantity: int
    reason: str


class CheckoutResponse(BaseModel):
    success: bool
    total: Decimal
    sale_ids: List[int] = []
    failed: Optional[FailedLineResponse] = None
    not_attempted: List[CartLineResponse] = []
    cart: CartResponse
