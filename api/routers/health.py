"""
Health Router - Health checks and system status endpoints
"""

from fastapi import APIRouter, Depends
from typing import Dict, Any

from api.dependencies import get_app_state, AppState

router = APIRouter()


@router.get("/ready")
async def health_check_ready(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    """
    Readiness check.

    The gateway holds no models, so it is ready as soon as it serves requests.
    Details report the configured provider orders and which providers have a key.
    """
    return {
        "ready": True,
        "details": state.get_status()
    }
