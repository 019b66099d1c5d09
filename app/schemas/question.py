# app/schemas/question.py

from datetime import datetime
from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict


QuestionCategory = Literal["sustainability", "quality", "transparency"]
Importance = Literal["high", "medium", "low"]

QUESTION_CATEGORIES: tuple[str, ...] = get_args(QuestionCategory)
IMPORTANCE_LEVELS: tuple[str, ...] = get_args(Importance)


class AnswerUpdate(BaseModel):
    # Any on purpose: the type check lives in validate_answer
    answer: Any = None


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    question_text: str
    answer: Optional[str] = None
    category: QuestionCategory
    importance: Importance
    ai_generated: bool
    order_index: int
    created_at: datetime
