from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Report(Base):
    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    product_id: Mapped[int] = mapped_column(Integer, ForeignKey("products.id"), index=True, nullable=False)

    # 0-100, two decimal places
    overall_score: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    sustainability_score: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    quality_score: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    transparency_score: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)

    insights: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    recommendations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # generating | completed | failed
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="generating")

    # Latest created_at per product is the current report
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    product = relationship("Product", back_populates="reports")
