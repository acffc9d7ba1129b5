"""
SaleTransaction: append-only sale log. Written by transaction_service.record_sale
in the same database transaction as the stock decrement. Never updated or deleted.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pharmacare.db.base import Base


class SaleTransaction(Base):
    __tablename__ = "sales_transactions"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id", ondelete="RESTRICT"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)  # quantity * unit_price, never edited
    type = Column(String(16), nullable=False, default="sale")
    status = Column(String(32), nullable=False, default="completed")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    medicine = relationship("Medicine")
    customer = relationship("Customer", backref="sales")
