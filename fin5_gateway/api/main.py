"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fin5_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fin5_gateway.api.v1 import commission, insurance, prescreening
from fin5_gateway.infrastructure.database.models import Base
from fin5_gateway.infrastructure.database.session import engine
from fin5_gateway.infrastructure.observability.logging import setup_logging
from fin5_gateway.config import settings

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fin5 Gateway",
        description="Vehicle-loan prescreening, dealer commission and loan insurance service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Last added = first executed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(prescreening.router, prefix="/v1", tags=["prescreening"])
    app.include_router(commission.router, prefix="/v1", tags=["commission"])
    app.include_router(insurance.router, prefix="/v1", tags=["insurance"])

    return app


app = create_app()
