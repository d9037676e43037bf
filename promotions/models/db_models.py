"""SQLAlchemy model for the promotions table.

The table is owned by the marketing back office; this package only reads
it. to_record() produces the flat promotion shape every source returns.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.models.base import Base, TimestampMixin


class PromotionRow(TimestampMixin, Base):
    """A promotion as stored by the back office."""

    __tablename__ = "promotions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    discount_type: Mapped[str] = mapped_column(String(32), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    code: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    min_order_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    max_discount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    applicable_categories: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description or "",
            "discountType": self.discount_type,
            "discountValue": self.discount_value,
            "code": self.code,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "isActive": self.is_active,
            "minOrderAmount": self.min_order_amount,
            "maxDiscount": self.max_discount,
            "applicableCategories": list(self.applicable_categories or []),
            "image": self.image,
        }
