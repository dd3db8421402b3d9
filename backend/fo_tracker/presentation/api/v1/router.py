"""V1 API router: aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from fo_tracker.presentation.api.v1.endpoints.health import router as health_router
from fo_tracker.presentation.api.v1.endpoints.designers import router as designers_router
from fo_tracker.presentation.api.v1.endpoints.jobs import router as jobs_router
from fo_tracker.presentation.api.v1.endpoints.metrics import router as metrics_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(designers_router)
router.include_router(jobs_router)
router.include_router(metrics_router)
