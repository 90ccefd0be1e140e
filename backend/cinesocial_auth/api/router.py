"""API router aggregator.

All endpoint routers are included here.
"""

from fastapi import APIRouter

from cinesocial_auth.api import auth

router = APIRouter()

# =============================================================================
# Authentication
# =============================================================================

router.include_router(auth.router, prefix="/auth", tags=["auth"])
