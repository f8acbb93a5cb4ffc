"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.activity import router as activity_router
from api.v1.gamification import router as gamification_router
from api.v1.session import router as session_router

router = APIRouter()

router.include_router(session_router, prefix="/session", tags=["Session"])
router.include_router(gamification_router, prefix="/gamification", tags=["Gamification"])
router.include_router(activity_router, prefix="/activity", tags=["Activity"])
