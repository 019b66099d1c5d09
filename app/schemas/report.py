from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


ReportStatus = Literal["generating", "completed", "failed"]


class ReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int

    overall_score: Decimal
    sustainability_score: Decimal
    quality_score: Decimal
    transparency_score: Decimal

    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    status: ReportStatus
    created_at: datetime
