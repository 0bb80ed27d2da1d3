from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from personnel.db.init_db import init_db
from personnel.error_handlers import register_error_handlers
from personnel.logging_config import configure_app_logging
from personnel.routers import employees, health, payroll, performance_reviews
from personnel.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        init_db(seed=settings.seed_demo_data)
        logger.info("Database initialized (tables ensured%s)", ", demo seed checked" if settings.seed_demo_data else "")

        yield

    app = FastAPI(title="personnel", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(employees.router)
    app.include_router(performance_reviews.router)
    app.include_router(payroll.router)

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run("personnel.main:app", host=settings.host, port=settings.port)


app = create_app()
