from __future__ import annotations

from fastapi import APIRouter

from intake.api.intake import router as intake_router

api_router = APIRouter(prefix="/api")

api_router.include_router(intake_router)
