"""
Purchases from suppliers.

PurchaseTransaction is the order row with a status lifecycle:
pending -> received | cancelled. Stock moves only on reaching "received".
PurchaseReceipt is the append-only log row written together with that stock increment.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, DateTime, CheckConstraint
from sqlalchemy.orm import relationship, backref
from sqlalchemy.sql import func
from pharmacare.db.base import Base

PURCHASE_STATUSES = ("pending", "received", "cancelled")


class PurchaseTransaction(Base):
    __tablename__ = "purchases"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_purchases_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id", ondelete="RESTRICT"), nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    invoice_number = Column(String(64), unique=True, nullable=False, index=True)
    date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default="pending")  # pending | received | cancelled
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    medicine = relationship("Medicine")
    supplier = relationship("Supplier", backref="purchases")


class PurchaseReceipt(Base):
    __tablename__ = "purchase_transactions"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False, unique=True)
    medicine_id = Column(Integer, nullable=False)
    supplier_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    invoice_number = Column(String(64), nullable=False)
    type = Column(String(16), nullable=False, default="purchase")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    purchase = relationship("PurchaseTransaction", backref=backref("receipt", uselist=False))
