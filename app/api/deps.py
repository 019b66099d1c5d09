# app/api/deps.py

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.ai_gateway import AIGateway, GeminiGateway
from app.services.report_renderer import PlaywrightRenderer, ReportRenderer
from app.services.workflow import AssessmentWorkflow


# Overridden in tests through app.dependency_overrides
def get_ai_gateway() -> AIGateway:
    return GeminiGateway()


def get_report_renderer() -> ReportRenderer:
    return PlaywrightRenderer()


def get_workflow(
    request: Request,
    db: Session = Depends(get_db),
    ai: AIGateway = Depends(get_ai_gateway),
    renderer: ReportRenderer = Depends(get_report_renderer),
) -> AssessmentWorkflow:
    # set by the startup bootstrap in main.py
    user_id = request.app.state.demo_user_id
    return AssessmentWorkflow(db, ai, renderer, user_id=user_id)
