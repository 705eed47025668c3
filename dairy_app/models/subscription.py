from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from dairy_app.core.database import Base

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    delivery_time = Column(String(10), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    customer = relationship("Customer", back_populates="subscriptions")
    day_rows = relationship(
        "SubscriptionDay",
        back_populates="subscription",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def days(self) -> list[str]:
        names = {row.weekday for row in self.day_rows}
        return [day for day in WEEKDAYS if day in names]

    @days.setter
    def days(self, values) -> None:
        wanted = []
        for value in values:
            name = str(value).strip().lower()
            if name not in WEEKDAYS:
                raise ValueError(f"Unknown weekday: {value}")
            if name not in wanted:
                wanted.append(name)

        kept = [row for row in self.day_rows if row.weekday in wanted]
        existing = {row.weekday for row in kept}
        kept.extend(SubscriptionDay(weekday=name) for name in wanted if name not in existing)
        self.day_rows = kept


class SubscriptionDay(Base):
    __tablename__ = "subscription_days"
    __table_args__ = (UniqueConstraint("subscription_id", "weekday", name="uq_subscription_days_weekday"),)

    id = Column(Integer, primary_key=True)
    subscription_id = Column(
        Integer,
        ForeignKey("subscriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    weekday = Column(String(10), nullable=False)

    subscription = relationship("Subscription", back_populates="day_rows")
