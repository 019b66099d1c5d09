from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.product import ProductOut
from app.schemas.question import QuestionOut
from app.schemas.report import ReportOut


StepName = Literal["basic_info", "details", "questions", "review"]


class AdvanceRequest(BaseModel):
    # None while the assessment has not created its product yet (step 1)
    product_id: Optional[int] = None
    data: dict[str, Any] = Field(default_factory=dict)


class WorkflowStateOut(BaseModel):
    step: int
    step_name: StepName
    product: Optional[ProductOut] = None

    # questions created by this transition (step 2 -> 3)
    generated_questions: list[QuestionOut] = Field(default_factory=list)
    generation_error: Optional[str] = None

    # report produced by this transition (step 4)
    report: Optional[ReportOut] = None

    completeness: int = 0
