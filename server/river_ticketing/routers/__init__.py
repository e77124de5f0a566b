"""FastAPI routers package."""

from .assignment import router as assignment_router
from .boarding import router as boarding_router
from .health import router as health_router
from .metrics import router as metrics_router
from .operator import router as operator_router
from .route import router as route_router
from .sale import router as sale_router
from .vessel import router as vessel_router

__all__ = [
    "assignment_router",
    "boarding_router",
    "health_router",
    "metrics_router",
    "operator_router",
    "route_router",
    "sale_router",
    "vessel_router",
]
