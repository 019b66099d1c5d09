from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_workflow
from app.schemas.question import AnswerUpdate, QuestionOut
from app.services.workflow import AssessmentWorkflow

router = APIRouter(prefix="/questions", tags=["Questions"])


@router.patch("/{question_id}", response_model=QuestionOut)
def set_answer(question_id: int, payload: AnswerUpdate, workflow: AssessmentWorkflow = Depends(get_workflow)) -> QuestionOut:
    # Works at any step; re-sending the same answer changes nothing
    question = workflow.set_answer(question_id, payload.answer)
    return QuestionOut.model_validate(question)
