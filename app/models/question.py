# app/models/question.py

from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship
from app.core.database import Base


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    question_text = Column(Text, nullable=False)
    answer = Column(Text, nullable=True)

    category = Column(String(20), nullable=False)    # sustainability | quality | transparency
    importance = Column(String(10), nullable=False)  # high | medium | low
    ai_generated = Column(Boolean, default=True, nullable=False)
    order_index = Column(Integer, nullable=False)    # display order, not unique

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    product = relationship("Product", back_populates="questions")
