# app/services/workflow.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AIGenerationError, IncompleteAssessmentError, NotFoundError
from app.models.product import Product
from app.models.question import Question
from app.models.report import Report
from app.models.user import User
from app.services import repository
from app.services.ai_gateway import AIGateway
from app.services.report_renderer import ReportRenderer, completeness, report_filename
from app.services.validation import (
    is_answered,
    validate_answer,
    validate_product_details,
    validate_product_input,
    validate_product_update,
)

logger = logging.getLogger(__name__)

BASIC_INFO, DETAILS, QUESTIONS, REVIEW = 1, 2, 3, 4
STEP_NAMES = {
    BASIC_INFO: "basic_info",
    DETAILS: "details",
    QUESTIONS: "questions",
    REVIEW: "review",
}


@dataclass
class WorkflowResult:
    step: int
    product: Optional[Product] = None
    generated_questions: list[Question] = field(default_factory=list)
    generation_error: Optional[str] = None
    report: Optional[Report] = None
    completeness: int = 0

    @property
    def step_name(self) -> str:
        return STEP_NAMES[self.step]


def bootstrap_demo_user(db: Session) -> User:
    """Find-or-create the user that owns every product. Run once at startup."""
    return repository.get_or_create_user(db, settings.DEMO_USERNAME, settings.DEMO_EMAIL)


class AssessmentWorkflow:
    """
    Drives the 4-step assessment:

        1 basic info -> 2 details -> 3 AI questions -> 4 review/report

    Holds no state between calls; the step of each assessment is stored
    on its product (products.current_step). A session with no product
    yet is at step 1.
    """

    def __init__(self, db: Session, ai: AIGateway, renderer: ReportRenderer, user_id: int) -> None:
        self.db = db
        self.ai = ai
        self.renderer = renderer
        self.user_id = user_id

    # ---------- navigation ----------

    def get_state(self, product_id: Optional[int]) -> WorkflowResult:
        if product_id is None:
            return WorkflowResult(step=BASIC_INFO)
        product = repository.get_product(self.db, product_id)
        return self._result(product)

    def advance(self, product_id: Optional[int], data: Optional[Mapping[str, Any]] = None) -> WorkflowResult:
        """Run the exit gate of the current step and move forward when it passes."""
        data = data or {}
        product = repository.get_product(self.db, product_id) if product_id is not None else None
        step = product.current_step if product is not None else BASIC_INFO

        if step == BASIC_INFO:
            return self._advance_from_basic_info(product, data)
        if step == DETAILS:
            return self._advance_from_details(product, data)
        if step == QUESTIONS:
            return self._advance_from_questions(product)
        return self._advance_from_review(product)

    def retreat(self, product_id: Optional[int]) -> WorkflowResult:
        """Always allowed, floor at step 1. Never touches status or answers."""
        if product_id is None:
            return WorkflowResult(step=BASIC_INFO)

        product = repository.get_product(self.db, product_id)
        if product.current_step > BASIC_INFO:
            product = repository.update_product(
                self.db, product.id, {"current_step": product.current_step - 1}
            )
        logger.info("Product %s back to step %s", product.id, product.current_step)
        return self._result(product)

    def _advance_from_basic_info(self, product: Optional[Product], data: Mapping[str, Any]) -> WorkflowResult:
        fields = validate_product_input(data)
        fields["current_step"] = DETAILS

        if product is None:
            product = repository.create_product(self.db, self.user_id, fields)
        else:
            product = repository.update_product(self.db, product.id, fields)

        logger.info("Product %s passed basic info", product.id)
        return self._result(product)

    def _advance_from_details(self, product: Product, data: Mapping[str, Any]) -> WorkflowResult:
        fields = validate_product_details(data)
        fields["current_step"] = QUESTIONS
        if product.status == "draft":
            fields["status"] = "in_progress"
        product = repository.update_product(self.db, product.id, fields)
        logger.info("Product %s passed details", product.id)

        result = self._result(product)

        # The step change is already committed: a failed generation leaves
        # the user on the questions step, where it can be retried.
        if repository.count_questions(self.db, product.id) == 0:
            try:
                result.generated_questions = self.generate_questions(product.id)
            except AIGenerationError as e:
                logger.warning("Question generation deferred for product %s: %s", product.id, e)
                result.generation_error = e.message
        return result

    def _advance_from_questions(self, product: Product) -> WorkflowResult:
        questions = repository.list_questions(self.db, product.id)
        if not any(is_answered(q.answer) for q in questions):
            raise IncompleteAssessmentError("Please answer at least one question before proceeding.")

        product = repository.update_product(self.db, product.id, {"current_step": REVIEW})
        logger.info("Product %s moved to review", product.id)
        return self._result(product, questions)

    def _advance_from_review(self, product: Product) -> WorkflowResult:
        # Review is terminal: every advance re-scores and stays on step 4
        report = self.generate_report(product.id)
        product = repository.get_product(self.db, product.id)
        result = self._result(product)
        result.report = report
        return result

    def _result(self, product: Product, questions: Optional[list[Question]] = None) -> WorkflowResult:
        if questions is None:
            questions = repository.list_questions(self.db, product.id)
        _, percent = completeness(questions)
        return WorkflowResult(step=product.current_step, product=product, completeness=percent)

    # ---------- operations ----------

    def list_products(self) -> list[Product]:
        return repository.list_products(self.db, self.user_id)

    def create_product(self, data: Mapping[str, Any]) -> Product:
        fields = validate_product_input(data)
        fields.update(validate_product_details(data))
        return repository.create_product(self.db, self.user_id, fields)

    def update_product(self, product_id: int, data: Mapping[str, Any]) -> Product:
        repository.get_product(self.db, product_id)
        return repository.update_product(self.db, product_id, validate_product_update(data))

    def list_questions(self, product_id: int) -> list[Question]:
        return repository.list_questions(self.db, product_id)

    def generate_questions(self, product_id: int) -> list[Question]:
        """Ask the AI for a new batch and append it. Nothing is written if the AI call fails."""
        product = repository.get_product(self.db, product_id)
        generated = self.ai.generate_questions(product)
        if not generated:
            logger.warning("AI returned no questions for product %s", product_id)
            return []
        return repository.create_questions(self.db, product_id, [g.as_row() for g in generated])

    def set_answer(self, question_id: int, value: Any) -> Question:
        answer = validate_answer(value)
        return repository.set_question_answer(self.db, question_id, answer)

    def progress(self, product_id: int) -> tuple[int, int, int]:
        """Returns (total, answered, completeness %)."""
        questions = repository.list_questions(self.db, product_id)
        answered, percent = completeness(questions)
        return len(questions), answered, percent

    def generate_report(self, product_id: int) -> Report:
        """
        Score every question (answered or not) and upsert the current report.
        A scoring failure raises before anything is written, so a previous
        report keeps its status.
        """
        product = repository.get_product(self.db, product_id)
        questions = repository.list_questions(self.db, product_id)

        scoring = self.ai.score_product(product, questions)

        row = scoring.as_row()
        row["status"] = "completed"
        report = repository.upsert_report(self.db, product_id, row)
        repository.update_product(self.db, product_id, {"status": "completed"})

        logger.info("Report %s completed for product %s", report.id, product_id)
        return report

    def get_report(self, product_id: int) -> Report:
        repository.get_product(self.db, product_id)
        report = repository.get_latest_report(self.db, product_id)
        if report is None:
            raise NotFoundError("Report not found.")
        return report

    def render_pdf(self, product_id: int) -> tuple[str, bytes]:
        """Returns (filename, pdf bytes). Read-only: renderer errors leave the database as it was."""
        report = self.get_report(product_id)
        product = repository.get_product(self.db, product_id)
        questions = repository.list_questions(self.db, product_id)

        pdf = self.renderer.render(product, questions, report)
        return report_filename(product.name), pdf
