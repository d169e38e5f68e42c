"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints of the booking and participation service
"""
from fastapi import APIRouter

from klass_hero.api.v1 import bookings, enrollments, family, participation, programs
from klass_hero.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(programs.router, tags=["Programs"])
router.include_router(bookings.router, tags=["Bookings"])
router.include_router(enrollments.router, tags=["Enrollments"])
router.include_router(family.router, tags=["Family"])
router.include_router(participation.router, tags=["Participation"])


@router.get("/health", tags=["Health"])
def health_check() -> dict:
    return {"status": "ok"}


logger.debug(f"API v1 router configured with {len(router.routes)} routes")
