from __future__ import annotations

from typing import Any, Mapping

from app.core.errors import ValidationError
from app.schemas.product import BASIC_INFO_FIELDS, DETAIL_FIELDS, PRODUCT_CATEGORIES


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def is_answered(answer: Any) -> bool:
    """An empty or whitespace-only answer counts as unanswered."""
    return isinstance(answer, str) and answer.strip() != ""


def validate_product_input(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Basic-info gate: name is required and category must be one of the
    fixed categories. Other fields pass through as free text.
    Returns only the basic-info fields present in `data`.
    """
    fields: dict[str, str] = {}

    name = data.get("name")
    if _is_blank(name) or not isinstance(name, str):
        fields["name"] = "Product name is required."

    category = data.get("category")
    if category not in PRODUCT_CATEGORIES:
        fields["category"] = "Category must be one of: " + ", ".join(PRODUCT_CATEGORIES) + "."

    if fields:
        raise ValidationError("Invalid product basic information.", fields=fields)

    cleaned = {key: data[key] for key in BASIC_INFO_FIELDS if key in data}
    cleaned["name"] = name.strip()
    return cleaned


def validate_product_details(data: Mapping[str, Any]) -> dict[str, Any]:
    """Details gate: nothing is required, but values must be text (certifications a list of text)."""
    fields: dict[str, str] = {}
    cleaned: dict[str, Any] = {}

    for key in DETAIL_FIELDS:
        if key not in data:
            continue
        value = data[key]

        if key == "certifications":
            if value is None:
                value = []
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                fields[key] = "Certifications must be a list of text labels."
                continue
            cleaned[key] = [v.strip() for v in value if v.strip()]
            continue

        if value is not None and not isinstance(value, str):
            fields[key] = "Must be text."
            continue
        cleaned[key] = value

    if fields:
        raise ValidationError("Invalid product details.", fields=fields)

    return cleaned


def validate_product_update(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Partial update: name/category are only checked when present, so an
    update can never blank them out.
    """
    cleaned = validate_product_details(data)

    if "name" in data or "category" in data:
        # fill the absent half with a valid placeholder so only the sent fields are judged
        probe = {
            "name": data.get("name", "placeholder"),
            "category": data.get("category", PRODUCT_CATEGORIES[0]),
        }
        checked = validate_product_input(probe)
        if "name" in data:
            cleaned["name"] = checked["name"]
        if "category" in data:
            cleaned["category"] = checked["category"]

    for key in ("brand", "description"):
        if key in data:
            if data[key] is not None and not isinstance(data[key], str):
                raise ValidationError("Invalid product update.", fields={key: "Must be text."})
            cleaned[key] = data[key]

    return cleaned


def validate_answer(value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError("Answer is required and must be text.", fields={"answer": "Must be a string."})
    return value
