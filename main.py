# main.py

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import engine, Base, SessionLocal
from app.core.errors import AssessmentError, ValidationError
from app.core.logging_config import setup_logging

# Import the models so they register on Base.metadata
from app.models.user import User  # noqa: F401
from app.models.product import Product  # noqa: F401
from app.models.question import Question  # noqa: F401
from app.models.report import Report  # noqa: F401

from app.api.assessments import router as assessments_router
from app.api.products import router as products_router
from app.api.questions import router as questions_router
from app.services.workflow import bootstrap_demo_user

app = FastAPI(
    title="Product Transparency Assessment API",
    version="0.1.0",
)

# === CORS: front-end origins (Vite / Next on localhost) ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    setup_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        app.state.demo_user_id = bootstrap_demo_user(db).id
    finally:
        db.close()


@app.exception_handler(AssessmentError)
async def handle_assessment_error(request: Request, exc: AssessmentError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    fields = {
        ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]): err["msg"]
        for err in exc.errors()
    }
    error = ValidationError("Invalid request body.", fields=fields)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


app.include_router(products_router)
app.include_router(questions_router)
app.include_router(assessments_router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
