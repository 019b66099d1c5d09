# app/api/products.py

from typing import List

from fastapi import APIRouter, Depends, Response, status

from app.schemas.product import ProductCreate, ProductOut, ProductUpdate, ProgressOut
from app.schemas.question import QuestionOut
from app.schemas.report import ReportOut
from app.services.workflow import AssessmentWorkflow
from app.api.deps import get_workflow


router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=List[ProductOut])
def list_products(workflow: AssessmentWorkflow = Depends(get_workflow)):
    """
    Products of the demo user, newest first.
    """
    return workflow.list_products()


@router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, workflow: AssessmentWorkflow = Depends(get_workflow)):
    """
    Creates a product from the basic-info fields (details optional).
    """
    return workflow.create_product(payload.model_dump(exclude_unset=True))


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)):
    return workflow.get_state(product_id).product


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    workflow: AssessmentWorkflow = Depends(get_workflow),
):
    # Pydantic v2: model_dump(exclude_unset=True) keeps it a partial update
    return workflow.update_product(product_id, payload.model_dump(exclude_unset=True))


@router.get("/{product_id}/progress", response_model=ProgressOut)
def get_progress(product_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)):
    total, answered, percent = workflow.progress(product_id)
    return ProgressOut(
        product_id=product_id,
        total_questions=total,
        answered_questions=answered,
        completeness=percent,
    )


@router.get("/{product_id}/questions", response_model=List[QuestionOut])
def list_questions(product_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)):
    """
    Questions ordered by order_index.
    """
    return workflow.list_questions(product_id)


@router.post("/{product_id}/generate-questions", response_model=List[QuestionOut])
def generate_questions(product_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)):
    """
    Asks the AI for a new batch of questions and appends it to the product.
    """
    return workflow.generate_questions(product_id)


@router.get("/{product_id}/report", response_model=ReportOut)
def get_report(product_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)):
    """
    Latest report of the product (by creation date).
    """
    return workflow.get_report(product_id)


@router.post("/{product_id}/generate-report", response_model=ReportOut)
def generate_report(product_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)):
    """
    Scores the product with the AI and creates or updates its report.
    """
    return workflow.generate_report(product_id)


@router.get(
    "/{product_id}/report/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
def download_report_pdf(product_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)):
    filename, pdf = workflow.render_pdf(product_id)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
