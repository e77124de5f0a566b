"""Models module exporting all database models."""

from .assignment import VesselAssignment
from .boarding import BoardingRecord, BoardingStatus
from .client import Client
from .operator import Operator, OperatorStatus
from .route import Route
from .sale import AnnulmentKind, PaymentType, Sale, SaleAnnulment, SaleStatus
from .vessel import Vessel, VesselStatus

__all__ = [
    # Catalog entities
    "Route",
    "Vessel",
    "VesselStatus",
    "VesselAssignment",

    # Sale entities
    "Client",
    "Sale",
    "SaleStatus",
    "PaymentType",
    "SaleAnnulment",
    "AnnulmentKind",

    # Operator entity
    "Operator",
    "OperatorStatus",

    # Boarding control
    "BoardingRecord",
    "BoardingStatus",
]
