from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from intake.core.app_context import AppContext, set_app_context
from intake.core.logging import RequestIdMiddleware, setup_logging
from intake.core.state import InMemoryStore
from intake.flow_core.compiler import compile_flow
from intake.flow_core.engine import IntakeFlowEngine
from intake.flow_core.loader import default_flow_path, load_flow_definition
from intake.router import api_router
from intake.settings import Settings, get_settings

setup_logging()
logger = logging.getLogger(__name__)


def build_app_context(settings: Settings) -> AppContext:
    """Load and compile the flow once; it is shared read-only by every session."""
    flow_path = settings.flow_path or default_flow_path()
    graph = compile_flow(load_flow_definition(flow_path))
    engine = IntakeFlowEngine(graph, max_unclear_answers=settings.max_unclear_answers)
    return AppContext(engine=engine, store=InMemoryStore(), settings=settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    set_app_context(app, build_app_context(settings))
    logger.info("Intake service ready")
    yield
    logger.info("Intake service shutting down")


def create_app() -> FastAPI:
    app = FastAPI(title="Life Intake", lifespan=lifespan)
    app.add_middleware(RequestIdMiddleware)
    if get_settings().development_mode:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.include_router(api_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    uvicorn.run("intake.main:app", host="0.0.0.0", port=8000)
