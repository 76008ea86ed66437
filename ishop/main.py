# ishop/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi import FastAPI

from ishop.core.config import get_settings
from ishop.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from ishop.models import product as _product_models  # noqa: F401
from ishop.models import order as _order_models  # noqa: F401
from ishop.models import supplier as _supplier_models  # noqa: F401

# Routers
from ishop.routers.products import router as products_router
from ishop.routers.images import router as images_router
from ishop.routers.suppliers import router as suppliers_router
from ishop.routers.shippings import router as shippings_router

settings = get_settings()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
    """
    logger.info("Startup: connecting to catalog database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    logger.info(
        "Startup: content store backend=%s, image policy=%r",
        settings.STORAGE_BACKEND,
        settings.image_policy(),
    )
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
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

# Versioned API prefix, e.g. /api/v1
app.include_router(products_router, prefix=settings.API_V1_STR)
app.include_router(images_router, prefix=settings.API_V1_STR)
app.include_router(suppliers_router, prefix=settings.API_V1_STR)
app.include_router(shippings_router, prefix=settings.API_V1_STR)

# Local blobs are served read-only; Supabase serves its own public URLs
if settings.STORAGE_BACKEND == "local":
    app.mount(
        "/media",
        StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False),
        name="media",
    )


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "ishop-backend"}
