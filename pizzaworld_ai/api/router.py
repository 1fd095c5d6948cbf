from __future__ import annotations

from fastapi import APIRouter

from pizzaworld_ai.api.assistant import router as assistant_router
from pizzaworld_ai.api.health import router as health_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(assistant_router)
