# app/core/config.py

import os
from dotenv import load_dotenv

# Project root (where main.py and .env live)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
ENV_PATH = os.path.join(BASE_DIR, ".env")

if os.path.exists(ENV_PATH):
    load_dotenv(ENV_PATH)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    def __init__(self) -> None:
        # SQLite by default when there is no .env
        self.DATABASE_URL: str = os.getenv(
            "DATABASE_URL",
            "sqlite:///./transparency.db",
        )

        # Generative AI service
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
        self.GEMINI_API_BASE: str = os.getenv(
            "GEMINI_API_BASE",
            "https://generativelanguage.googleapis.com/v1beta",
        )
        self.AI_TIMEOUT_SECONDS: float = float(os.getenv("AI_TIMEOUT_SECONDS", "60"))

        # PDF rendering
        self.PDF_TIMEOUT_SECONDS: float = float(os.getenv("PDF_TIMEOUT_SECONDS", "30"))

        # Owner of every product until real auth exists
        self.DEMO_USERNAME: str = os.getenv("DEMO_USERNAME", "demo_user")
        self.DEMO_EMAIL: str = os.getenv("DEMO_EMAIL", "demo@example.com")

        self.CORS_ORIGINS: list[str] = _split_csv(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
        )
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
