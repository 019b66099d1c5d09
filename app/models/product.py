# app/models/product.py

from datetime import datetime
from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship
from app.core.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Basic info (step 1)
    name = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False)  # ex.: "textiles-clothing"
    brand = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    # Details (step 2), all free text
    weight = Column(String(100), nullable=True)
    dimensions = Column(String(255), nullable=True)
    materials = Column(Text, nullable=True)
    manufacturing_country = Column(String(100), nullable=True)
    manufacturing_date = Column(String(50), nullable=True)
    certifications = Column(JSON, nullable=False, default=list)  # list[str]
    image_url = Column(String(500), nullable=True)

    # draft | in_progress | completed
    status = Column(String(20), nullable=False, default="draft")
    # 1 basic info, 2 details, 3 questions, 4 review
    current_step = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    user = relationship("User", back_populates="products")
    questions = relationship(
        "Question",
        back_populates="product",
        order_by="Question.order_index",
    )
    reports = relationship("Report", back_populates="product")
