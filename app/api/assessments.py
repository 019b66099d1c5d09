from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_workflow
from app.schemas.product import ProductOut
from app.schemas.question import QuestionOut
from app.schemas.report import ReportOut
from app.schemas.workflow import AdvanceRequest, WorkflowStateOut
from app.services.workflow import AssessmentWorkflow, WorkflowResult

router = APIRouter(prefix="/assessments", tags=["Assessments"])


def _to_out(result: WorkflowResult) -> WorkflowStateOut:
    return WorkflowStateOut(
        step=result.step,
        step_name=result.step_name,
        product=ProductOut.model_validate(result.product) if result.product else None,
        generated_questions=[QuestionOut.model_validate(q) for q in result.generated_questions],
        generation_error=result.generation_error,
        report=ReportOut.model_validate(result.report) if result.report else None,
        completeness=result.completeness,
    )


@router.post("/advance", response_model=WorkflowStateOut)
def advance(payload: AdvanceRequest, workflow: AssessmentWorkflow = Depends(get_workflow)) -> WorkflowStateOut:
    """
    Runs the exit gate of the current step. Without product_id the
    assessment is at step 1 and `data` must carry the basic info.
    """
    return _to_out(workflow.advance(payload.product_id, payload.data))


@router.post("/{product_id}/retreat", response_model=WorkflowStateOut)
def retreat(product_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)) -> WorkflowStateOut:
    return _to_out(workflow.retreat(product_id))


@router.get("/{product_id}", response_model=WorkflowStateOut)
def get_state(product_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)) -> WorkflowStateOut:
    return _to_out(workflow.get_state(product_id))
