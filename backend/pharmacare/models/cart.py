"""
CartSession: persisted point-of-sale cart, one per user.

Stores the cart state machine step and its lines as JSON so the cart
survives between requests. Never converted into sale records directly;
checkout_service does that line by line.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
from pharmacare.db.base import Base


class CartSession(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    state = Column(String(32), nullable=False, default="empty")
    payload = Column(JSON, nullable=True, default=list)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<CartSession user_id={self.user_id} state={self.state}>"
