from fastapi import APIRouter
from .tokenize import router as tokenize_router
from .metrics import router as metrics_router

router = APIRouter(prefix="/api/v1")
router.include_router(tokenize_router)
router.include_router(metrics_router)
