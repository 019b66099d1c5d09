# app/services/ai_gateway.py

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Protocol, Sequence

import httpx

from app.core.config import settings
from app.core.errors import AIGenerationError, ScoringError
from app.schemas.question import IMPORTANCE_LEVELS, QUESTION_CATEGORIES
from app.services.validation import is_answered

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "Not specified"
NO_ANSWER = "No answer provided"

SCORE_FIELDS = {
    "overall_score": "overallScore",
    "sustainability_score": "sustainabilityScore",
    "quality_score": "qualityScore",
    "transparency_score": "transparencyScore",
}

_FENCE_OPEN = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```$")


@dataclass(frozen=True)
class GeneratedQuestion:
    question_text: str
    category: str
    importance: str
    order_index: int

    def as_row(self) -> dict[str, Any]:
        return {
            "question_text": self.question_text,
            "category": self.category,
            "importance": self.importance,
            "order_index": self.order_index,
            "ai_generated": True,
            "answer": None,
        }


@dataclass(frozen=True)
class Scoring:
    overall_score: Decimal
    sustainability_score: Decimal
    quality_score: Decimal
    transparency_score: Decimal
    insights: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def as_row(self) -> dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "sustainability_score": self.sustainability_score,
            "quality_score": self.quality_score,
            "transparency_score": self.transparency_score,
            "insights": list(self.insights),
            "recommendations": list(self.recommendations),
        }


class AIGateway(Protocol):
    def generate_questions(self, product: Any) -> list[GeneratedQuestion]:
        ...

    def score_product(self, product: Any, questions: Sequence[Any]) -> Scoring:
        ...


# ---------- prompts ----------


def _text_or_default(value: Optional[str]) -> str:
    if value is None or str(value).strip() == "":
        return NOT_SPECIFIED
    return str(value)


def product_record(product: Any) -> dict[str, Any]:
    """Product fields sent to the scorer (no ids or owner)."""
    return {
        "name": product.name,
        "category": product.category,
        "brand": product.brand,
        "description": product.description,
        "weight": product.weight,
        "dimensions": product.dimensions,
        "materials": product.materials,
        "manufacturingCountry": product.manufacturing_country,
        "manufacturingDate": product.manufacturing_date,
        "certifications": list(product.certifications or []),
    }


def build_question_prompt(product: Any) -> str:
    return f"""You are an expert in product transparency and sustainability assessment. Based on the following product information, generate 5-8 specific, detailed questions that would help assess the product's transparency, sustainability, and quality. The questions should be tailored to the product category and materials used.

Product Information:
- Name: {product.name}
- Category: {product.category}
- Brand: {_text_or_default(product.brand)}
- Description: {_text_or_default(product.description)}
- Materials: {_text_or_default(product.materials)}

For each question, determine:
1. The question text (should be specific and actionable)
2. Category (sustainability, quality, or transparency)
3. Importance level (high, medium, or low)
4. Order index (1-8, with most important questions first)

Return the response as a valid JSON object with this exact structure:
{{
  "questions": [
    {{
      "questionText": "string",
      "category": "sustainability|quality|transparency",
      "importance": "high|medium|low",
      "orderIndex": number
    }}
  ]
}}"""


def build_scoring_prompt(product: Any, questions: Sequence[Any]) -> str:
    qa_blocks = []
    for q in questions:
        answer = q.answer if is_answered(q.answer) else NO_ANSWER
        qa_blocks.append(
            f"Question ({q.category}, {q.importance}): {q.question_text}\nAnswer: {answer}\n"
        )

    return f"""You are an expert transparency and sustainability assessor. Analyze the following product and its transparency assessment responses to calculate a comprehensive transparency score.

Product Information:
{json.dumps(product_record(product), indent=2, ensure_ascii=False)}

Questions and Answers:
{chr(10).join(qa_blocks)}
Calculate scores (0-100) for:
1. Overall transparency score
2. Sustainability score
3. Quality score
4. Transparency score

Also provide:
5. Key insights (3-5 bullet points about strengths and areas for improvement)
6. Actionable recommendations (3-5 specific suggestions)

Provide accurate, fair scoring based on the completeness and quality of responses. Be constructive in insights and recommendations.

Return as a valid JSON object with this exact structure:
{{
  "overallScore": number,
  "sustainabilityScore": number,
  "qualityScore": number,
  "transparencyScore": number,
  "insights": ["string"],
  "recommendations": ["string"]
}}"""


# ---------- response parsing ----------


def strip_code_fence(text: str) -> str:
    """Remove an optional ``` / ```json fence around the model output."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_response(text: str) -> dict[str, Any]:
    """Raises ValueError when the text is not a JSON object."""
    payload = json.loads(strip_code_fence(text))
    if not isinstance(payload, dict):
        raise ValueError("AI response is not a JSON object")
    return payload


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_questions(payload: dict[str, Any]) -> list[GeneratedQuestion]:
    raw = payload.get("questions")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("'questions' is not a list")

    questions: list[GeneratedQuestion] = []
    for position, item in enumerate(raw, start=1):
        if not isinstance(item, dict):
            continue
        text = item.get("questionText")
        if not isinstance(text, str) or not text.strip():
            continue

        category = str(item.get("category", "")).strip().lower()
        if category not in QUESTION_CATEGORIES:
            category = "transparency"

        importance = str(item.get("importance", "")).strip().lower()
        if importance not in IMPORTANCE_LEVELS:
            importance = "medium"

        order_index = _to_int(item.get("orderIndex"))
        questions.append(
            GeneratedQuestion(
                question_text=text.strip(),
                category=category,
                importance=importance,
                order_index=order_index if order_index is not None else position,
            )
        )
    return questions


def clamp_score(value: Any) -> Decimal:
    """Missing or non-numeric -> 0, then clamp to [0, 100] with two decimals."""
    number = 0.0
    if value is not None and not isinstance(value, bool):
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = 0.0
    if math.isnan(number):
        number = 0.0

    number = max(0.0, min(100.0, number))
    return Decimal(str(round(number, 2))).quantize(Decimal("0.01"))


def _text_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def parse_scoring(payload: dict[str, Any]) -> Scoring:
    scores = {attr: clamp_score(payload.get(key)) for attr, key in SCORE_FIELDS.items()}
    return Scoring(
        **scores,
        insights=_text_list(payload.get("insights")),
        recommendations=_text_list(payload.get("recommendations")),
    )


# ---------- Gemini binding ----------


class UpstreamError(Exception):
    """The text service answered with something other than generated text."""


class GeminiGateway:
    """
    AI gateway backed by the Gemini generateContent REST endpoint.
    One request per call, no retries and no caching.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.AI_TIMEOUT_SECONDS
        self._transport = transport

    def _complete(self, prompt: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        logger.debug("Calling %s with a %d-char prompt", self.model, len(prompt))

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                r = client.post(url, headers={"x-goog-api-key": self.api_key}, json=body)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(f"AI service returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"AI service unreachable: {e.__class__.__name__}") from e
        except ValueError as e:
            raise UpstreamError("AI service returned a non-JSON envelope") from e

        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("AI service returned no candidates") from e

        if not text.strip():
            raise UpstreamError("AI service returned an empty completion")
        return text

    def generate_questions(self, product: Any) -> list[GeneratedQuestion]:
        try:
            text = self._complete(build_question_prompt(product))
            questions = parse_questions(parse_json_response(text))
        except (UpstreamError, ValueError) as e:
            logger.exception("Question generation failed for product %s", getattr(product, "id", None))
            raise AIGenerationError("Failed to generate AI questions.") from e

        logger.info("Generated %d questions for product %s", len(questions), getattr(product, "id", None))
        return questions

    def score_product(self, product: Any, questions: Sequence[Any]) -> Scoring:
        try:
            text = self._complete(build_scoring_prompt(product, questions))
            scoring = parse_scoring(parse_json_response(text))
        except (UpstreamError, ValueError) as e:
            logger.exception("Scoring failed for product %s", getattr(product, "id", None))
            raise ScoringError("Failed to calculate transparency score.") from e

        logger.info("Scored product %s: overall=%s", getattr(product, "id", None), scoring.overall_score)
        return scoring
