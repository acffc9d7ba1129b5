from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, CheckConstraint
from sqlalchemy.sql import func
from pharmacare.db.base import Base


class Medicine(Base):
    """
    Catalog entry. Sole source of truth for stock.

    stock only moves through stock_service.adjust_stock (sales, purchase
    receipts) or an explicit edit; the CHECK constraint backs the
    conditional update that keeps it non-negative.
    """
    __tablename__ = "medicines"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_medicines_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_medicines_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    manufacturer = Column(String(255), nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    expiry_date = Column(Date, nullable=True)
    category = Column(String(128), nullable=False, default="General", index=True)
    barcode = Column(String(32), unique=True, nullable=True, index=True)
    image_url = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Medicine id={self.id} name={self.name!r} stock={self.stock}>"
