"""
Finance tracker backend — FastAPI application entry‑point.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finance_tracker.config import settings
from finance_tracker.database import Base, SessionLocal, engine
from finance_tracker.pipeline import (
    MerchantCategorizer,
    ReceiptProcessor,
    SqlReceiptStore,
    build_extractor,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure storage dirs + tables exist
    os.makedirs(settings.DATA_DIR, exist_ok=True)
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    # Import models so Base.metadata knows about them
    import finance_tracker.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready (%s)", settings.DATABASE_URL)

    app.state.categorizer = MerchantCategorizer()
    app.state.processor = ReceiptProcessor(
        extractor=build_extractor(settings),
        store=SqlReceiptStore(SessionLocal),
        categorizer=app.state.categorizer,
    )
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Finance Tracker",
    description="Receipt upload → OCR → parsed fields → categorized transaction",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"service": "Finance Tracker", "version": "0.1.0", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# ── Register API routers ─────────────────────────────────────────────────
from finance_tracker.routers.receipts import router as receipts_router  # noqa: E402
from finance_tracker.routers.categorization import router as categorization_router  # noqa: E402

app.include_router(receipts_router, prefix="/api", tags=["Receipts"])
app.include_router(categorization_router, prefix="/api", tags=["Categorization"])
