# app/schemas/product.py

from datetime import datetime
from typing import List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field


ProductCategory = Literal[
    "agriculture",
    "meat-poultry",
    "dairy",
    "seafood",
    "processed-foods",
    "textiles-clothing",
    "cosmetics-personal-care",
    "animal-feed",
]
ProductStatus = Literal["draft", "in_progress", "completed"]

PRODUCT_CATEGORIES: tuple[str, ...] = get_args(ProductCategory)

BASIC_INFO_FIELDS = ("name", "category", "brand", "description")
DETAIL_FIELDS = (
    "weight",
    "dimensions",
    "materials",
    "manufacturing_country",
    "manufacturing_date",
    "certifications",
    "image_url",
)


class ProductBasicInfo(BaseModel):
    """
    Step 1 of the assessment.
    name/category stay loose here so the domain validation reports the error.
    """
    name: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    description: Optional[str] = None


class ProductDetails(BaseModel):
    """Step 2 of the assessment; every field is optional free text."""
    weight: Optional[str] = None
    dimensions: Optional[str] = None
    materials: Optional[str] = None
    manufacturing_country: Optional[str] = None
    manufacturing_date: Optional[str] = None
    certifications: Optional[List[str]] = None
    image_url: Optional[str] = None


class ProductCreate(ProductBasicInfo, ProductDetails):
    pass


class ProductUpdate(ProductBasicInfo, ProductDetails):
    pass


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int

    name: str
    category: str
    brand: Optional[str] = None
    description: Optional[str] = None

    weight: Optional[str] = None
    dimensions: Optional[str] = None
    materials: Optional[str] = None
    manufacturing_country: Optional[str] = None
    manufacturing_date: Optional[str] = None
    certifications: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None

    status: ProductStatus
    current_step: int

    created_at: datetime
    updated_at: datetime


class ProgressOut(BaseModel):
    product_id: int
    total_questions: int
    answered_questions: int
    completeness: int  # %
