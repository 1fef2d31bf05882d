from fastapi import APIRouter

from leadintake.api.v1.endpoints import duplicates, health, leads, messages

router = APIRouter(prefix="/api/v1")

router.include_router(leads.router)
router.include_router(messages.router)
router.include_router(duplicates.router)
router.include_router(health.router)
