# app/services/repository.py

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models.product import Product
from app.models.question import Question
from app.models.report import Report
from app.models.user import User

logger = logging.getLogger(__name__)

# Columns the callers may never overwrite through update_product
_PROTECTED_PRODUCT_FIELDS = {"id", "user_id", "created_at", "updated_at"}
_REPORT_FIELDS = (
    "overall_score",
    "sustainability_score",
    "quality_score",
    "transparency_score",
    "insights",
    "recommendations",
    "status",
)


# ---------- users ----------


def get_or_create_user(db: Session, username: str, email: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if user:
        return user

    user = User(username=username, email=email, password="password_hash")
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (id=%s)", username, user.id)
    return user


# ---------- products ----------


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found.")
    return product


def list_products(db: Session, user_id: int) -> list[Product]:
    return (
        db.query(Product)
        .filter(Product.user_id == user_id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


def create_product(db: Session, user_id: int, data: dict[str, Any]) -> Product:
    values = {k: v for k, v in data.items() if k not in _PROTECTED_PRODUCT_FIELDS}
    if values.get("certifications") is None:
        values["certifications"] = []

    product = Product(user_id=user_id, **values)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Created product %s (%s)", product.id, product.category)
    return product


def update_product(db: Session, product_id: int, data: dict[str, Any]) -> Product:
    product = get_product(db, product_id)

    for field, value in data.items():
        if field in _PROTECTED_PRODUCT_FIELDS:
            continue
        if field == "certifications" and value is None:
            value = []
        setattr(product, field, value)

    db.add(product)
    db.commit()
    db.refresh(product)
    return product


# ---------- questions ----------


def get_question(db: Session, question_id: int) -> Question:
    question = db.query(Question).filter(Question.id == question_id).first()
    if not question:
        raise NotFoundError("Question not found.")
    return question


def list_questions(db: Session, product_id: int) -> list[Question]:
    get_product(db, product_id)
    return (
        db.query(Question)
        .filter(Question.product_id == product_id)
        .order_by(Question.order_index.asc(), Question.id.asc())
        .all()
    )


def count_questions(db: Session, product_id: int) -> int:
    return db.query(Question).filter(Question.product_id == product_id).count()


def create_questions(db: Session, product_id: int, items: list[dict[str, Any]]) -> list[Question]:
    """Insert a batch in one transaction: either every question lands or none."""
    get_product(db, product_id)

    questions = [Question(product_id=product_id, **item) for item in items]
    db.add_all(questions)
    db.commit()
    for q in questions:
        db.refresh(q)
    return questions


def create_question(db: Session, product_id: int, data: dict[str, Any]) -> Question:
    return create_questions(db, product_id, [data])[0]


def set_question_answer(db: Session, question_id: int, answer: str) -> Question:
    question = get_question(db, question_id)

    # same value: nothing to write
    if question.answer == answer:
        return question

    question.answer = answer
    db.add(question)
    db.commit()
    db.refresh(question)
    return question


# ---------- reports ----------


def get_latest_report(db: Session, product_id: int) -> Optional[Report]:
    return (
        db.query(Report)
        .filter(Report.product_id == product_id)
        .order_by(Report.created_at.desc(), Report.id.desc())
        .first()
    )


def upsert_report(db: Session, product_id: int, data: dict[str, Any]) -> Report:
    """
    Update the current report (latest by created_at) of the product,
    or create the first one.
    """
    get_product(db, product_id)

    values = {k: data[k] for k in _REPORT_FIELDS if k in data}
    report = get_latest_report(db, product_id)

    if report is None:
        report = Report(product_id=product_id, **values)
        db.add(report)
    else:
        for field, value in values.items():
            setattr(report, field, value)

    db.commit()
    db.refresh(report)
    return report
