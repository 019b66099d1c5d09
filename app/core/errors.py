# app/core/errors.py

from __future__ import annotations

from typing import Optional


class AssessmentError(Exception):
    """Base for every error the assessment core surfaces to callers."""

    code = "assessment_error"
    status_code = 500

    def __init__(self, message: str, *, fields: Optional[dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = fields or {}

    def to_dict(self) -> dict:
        body: dict = {"detail": self.message, "code": self.code}
        if self.fields:
            body["fields"] = self.fields
        return body


class ValidationError(AssessmentError):
    code = "validation_error"
    status_code = 400


class NotFoundError(AssessmentError):
    code = "not_found"
    status_code = 404


class AIGenerationError(AssessmentError):
    code = "ai_generation_failed"
    status_code = 500


class ScoringError(AssessmentError):
    code = "scoring_failed"
    status_code = 500


class RenderError(AssessmentError):
    code = "render_failed"
    status_code = 500


class IncompleteAssessmentError(AssessmentError):
    code = "incomplete_assessment"
    status_code = 400
