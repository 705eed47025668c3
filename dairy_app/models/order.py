from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from dairy_app.core.database import Base

DELIVERY_TIMES = ("morning", "evening")
ORDER_STATUSES = ("pending", "delivered", "cancelled")


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        # one delivery per customer, day and slot; order generation relies on it
        UniqueConstraint("customer_id", "order_date", "delivery_time", name="uq_orders_customer_date_slot"),
    )

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    delivery_time = Column(String(10), nullable=False)  # morning / evening
    order_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), default="pending", nullable=False)  # pending / delivered / cancelled
    quantity = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    customer = relationship("Customer", back_populates="orders")
