"""Route-related Pydantic schemas."""

from pydantic import BaseModel, Field

from .common import Money


class CreateRouteRequest(BaseModel):
    """Request schema for creating a route."""

    name: str = Field(..., min_length=1, max_length=160, description="Route name")
    origin_port: str = Field(..., min_length=1, max_length=120, description="Origin port")
    destination_port: str = Field(..., min_length=1, max_length=120, description="Destination port")
    price: Money = Field(..., description="Catalog price per passenger")


class GetRouteRequest(BaseModel):
    """Request schema for getting a route."""

    route_id: str = Field(..., description="Route to retrieve")


class Route(BaseModel):
    """Route response schema."""

    id: str = Field(..., description="Unique route ID")
    name: str = Field(..., description="Route name")
    origin_port: str = Field(..., description="Origin port")
    destination_port: str = Field(..., description="Destination port")
    price: Money = Field(..., description="Catalog price per passenger")
    active: bool = Field(..., description="Whether the route is offered for sale")

    class Config:
        from_attributes = True


class ListRoutesResponse(BaseModel):
    """Response schema for listing routes."""

    items: list[Route] = Field(..., description="Active routes")
