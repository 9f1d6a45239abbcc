import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from uxray.api_routers.v1 import api_router
from uxray.features.health.routes.health import router as health_router
from uxray.platform.config import settings
from uxray.platform.db.init_db import init_db
from uxray.platform.exceptions import add_exception_handlers

# Configure logging to show INFO level messages
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Local runs and tests; deployed databases are migrated with alembic
    if settings.ENVIRONMENT == "local":
        init_db()
    yield


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Single-page UX audits: score, issues and recommendations",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": f"{settings.APP_NAME} API",
        "description": "AI-powered UX audits for any web page.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api/v1",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")
