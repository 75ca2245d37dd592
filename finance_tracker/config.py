"""
Application settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./data/finance_tracker.db"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # File storage
    DATA_DIR: str = "./data"
    UPLOAD_DIR: str = "./data/uploads/receipts"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    ALLOWED_UPLOAD_EXTENSIONS: List[str] = [".jpg", ".jpeg", ".png", ".gif", ".webp", ".pdf"]

    # OCR
    OCR_LANGUAGE: str = "eng"
    TESSERACT_CMD: str = ""
    OCR_TIMEOUT_SECONDS: int = 0  # 0 disables the timeout
    PDF_RENDER_DPI: int = 300

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
