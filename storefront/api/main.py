import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.adapters.sqlite.migrator import SQLiteMigrator
from storefront.api.deps import get_settings
from storefront.api.errors import register_error_handlers
from storefront.app_shell.config import validate_ops_rules
from storefront.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
    except (FileNotFoundError, ValueError):
        logger.critical("Rules load failed: %s", settings.rules_path, exc_info=True)
        raise SystemExit(1) from None
    validate_ops_rules(rules)

    SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    logger.info("Storefront API ready (db=%s)", settings.db_path)

    yield


app = FastAPI(
    title="Storefront CMS API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

register_error_handlers(app)

# --- Routers ---
from storefront.api.routes import (  # noqa: E402
    blog_posts,
    categories,
    form_submissions,
    products,
)

app.include_router(blog_posts.router, prefix="/api/blog-posts", tags=["Blog Posts"])
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(categories.router, prefix="/api/categories", tags=["Categories"])
app.include_router(
    form_submissions.router, prefix="/api/form-submissions", tags=["Form Submissions"]
)


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
