# dc_certificates/routers/__init__.py
# Router module initialization

from .chains import router as chains_router
from .health import router as health_router

__all__ = [
    'chains_router',
    'health_router'
]
