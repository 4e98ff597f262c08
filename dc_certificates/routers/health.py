# dc_certificates/routers/health.py
# Health check endpoints

import datetime
import sys
import time
from fastapi import APIRouter
from pydantic import BaseModel

from ..config import settings

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: int
    version: str

router = APIRouter()

_start_time = time.time()

def get_uptime() -> int:
    """Seconds since the application module was loaded"""
    return int(time.time() - _start_time)

@router.get("/health", response_model=HealthResponse, tags=["health"])
def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="online",
        timestamp=datetime.datetime.now().isoformat(),
        uptime=get_uptime(),
        version=settings.APP_VERSION
    )

@router.get("/health/detailed", tags=["health"])
def detailed_health_check():
    """Detailed health check with runtime and key policy information"""
    return {
        "status": "online",
        "timestamp": datetime.datetime.now().isoformat(),
        "uptime": get_uptime(),
        "policy": {
            "keySize": settings.KEY_SIZE,
            "publicExponent": settings.PUBLIC_EXPONENT,
            "rootValidityDays": settings.ROOT_VALIDITY_DAYS,
            "buildTimeoutSeconds": settings.BUILD_TIMEOUT_SECONDS
        },
        "system": {
            "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
            "start_time": _start_time
        }
    }
