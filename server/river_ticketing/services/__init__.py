"""Service layer package."""

from .assignment_service import AssignmentService
from .boarding_service import BoardingService
from .availability_service import AvailabilityService
from .client_service import ClientService
from .operator_service import OperatorService
from .route_service import RouteService
from .sale_service import SaleService
from .vessel_service import VesselService

__all__ = [
    "AssignmentService",
    "AvailabilityService",
    "BoardingService",
    "ClientService",
    "OperatorService",
    "RouteService",
    "SaleService",
    "VesselService",
]
