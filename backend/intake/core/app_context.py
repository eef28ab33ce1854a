from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

if TYPE_CHECKING:
    from fastapi import FastAPI

    from intake.core.state import SessionStore
    from intake.flow_core.engine import IntakeFlowEngine
    from intake.settings import Settings


@dataclass(slots=True)
class AppContext:
    engine: IntakeFlowEngine
    store: SessionStore
    settings: Settings


def set_app_context(app: FastAPI, ctx: AppContext) -> None:
    # Store one typed context object under app.state
    app.state.ctx = ctx


def get_app_context(app: FastAPI) -> AppContext:
    return cast("AppContext", app.state.ctx)
