from contextlib import asynccontextmanager

from app.core.logging_config import get_logger
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import router as api_router
from app.core.config import settings
from app.middleware.metrics_middleware import MetricsMiddleware
from app.services.metrics.instance import create_metrics_runtime

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    metrics = create_metrics_runtime(settings)
    app.state.metrics = metrics
    await metrics.start()
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")

    yield

    # Shutdown: final export happens inside stop()
    await metrics.stop()
    logger.info(f"{settings.PROJECT_NAME} stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Coin-flip tokenize endpoints with a periodic metrics exporter",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)

app.include_router(api_router)
