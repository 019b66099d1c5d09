# app/services/report_renderer.py

from __future__ import annotations

import logging
import os
import re
from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from app.core.config import settings
from app.core.errors import RenderError
from app.services.validation import is_answered

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

PDF_OPTIONS = {
    "format": "A4",
    "print_background": True,
    "margin": {"top": "20mm", "right": "20mm", "bottom": "20mm", "left": "20mm"},
}


class ReportRenderer(Protocol):
    def render(self, product: Any, questions: Sequence[Any], report: Any) -> bytes:
        ...


def completeness(questions: Sequence[Any]) -> tuple[int, int]:
    """Returns (answered, percent)."""
    answered = sum(1 for q in questions if is_answered(q.answer))
    if not questions:
        return answered, 0
    return answered, int(round(answered / len(questions) * 100))


def report_filename(product_name: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]", "_", product_name).lower()
    return f"transparency-report-{slug}.pdf"


def render_report_html(
    product: Any,
    questions: Sequence[Any],
    report: Any,
    generated_at: Optional[datetime] = None,
) -> str:
    generated_at = generated_at or datetime.utcnow()
    answered, percent = completeness(questions)

    template = _env.get_template("report.html")
    return template.render(
        product=product,
        questions=questions,
        report=report,
        answered=answered,
        completeness=percent,
        generated_on=generated_at.strftime("%B %d, %Y").replace(" 0", " "),
        generated_at=generated_at.isoformat(),
    )


class PlaywrightRenderer:
    """Prints the HTML report to PDF with headless Chromium."""

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout_ms = (timeout if timeout is not None else settings.PDF_TIMEOUT_SECONDS) * 1000

    def render(self, product: Any, questions: Sequence[Any], report: Any) -> bytes:
        html = render_report_html(product, questions, report)

        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(
                    headless=True,
                    args=["--no-sandbox", "--disable-setuid-sandbox"],
                )
                try:
                    page = browser.new_page()
                    page.set_default_timeout(self.timeout_ms)
                    page.set_content(html, wait_until="networkidle")
                    pdf = page.pdf(**PDF_OPTIONS)
                finally:
                    browser.close()
        except PlaywrightError as e:
            logger.exception("PDF rendering failed for product %s", getattr(product, "id", None))
            raise RenderError("Failed to generate PDF report.") from e

        logger.info("Rendered PDF for product %s (%d bytes)", getattr(product, "id", None), len(pdf))
        return pdf
