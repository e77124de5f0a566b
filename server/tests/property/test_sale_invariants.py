"""Property-based tests for sale admission invariants."""

from datetime import date, timedelta
from uuid import UUID

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from river_ticketing.core.exceptions import CapacityExceededError, PaymentMismatchError, ValidationError
from river_ticketing.models.sale import PaymentType
from river_ticketing.schemas.sale import PaymentMethodEntry, VoidSaleRequest
from river_ticketing.services.availability_service import AvailabilityService
from river_ticketing.services.sale_service import SaleService, validate_payment
from river_ticketing.services.schedule import WEEKDAYS, is_operating_day, normalize_weekday

# Fixtures are shared across examples; every example builds its own catalog.
db_settings = settings(
    max_examples=15,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

capacity_values = st.integers(min_value=1, max_value=30)
seat_counts = st.integers(min_value=1, max_value=8)

_ACCENTED = {"MIERCOLES": "MIÉRCOLES", "SABADO": "SÁBADO"}


@st.composite
def weekday_spellings(draw):
    """A weekday as a person might type it: accents optional, any case, stray spaces."""
    day = draw(st.sampled_from(WEEKDAYS))
    text = _ACCENTED.get(day, day) if draw(st.booleans()) else day
    lowered = draw(st.lists(st.booleans(), min_size=len(text), max_size=len(text)))
    text = "".join(c.lower() if low else c for c, low in zip(text, lowered))
    padding = st.sampled_from(["", " ", "  ", "\t"])
    return day, draw(padding) + text + draw(padding)


@given(spelled=weekday_spellings())
def test_weekday_spellings_normalize_to_canonical(spelled):
    day, text = spelled
    assert normalize_weekday(text) == day


@given(text=st.text(alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Mn", "Zs"), max_codepoint=0x17F)))
def test_normalize_weekday_is_idempotent(text):
    once = normalize_weekday(text)
    assert normalize_weekday(once) == once


@given(spelled=weekday_spellings(), days_ahead=st.integers(min_value=0, max_value=366))
def test_operating_day_ignores_spelling(spelled, days_ahead):
    day, text = spelled
    travel_date = date(2025, 1, 6) + timedelta(days=days_ahead)
    assert is_operating_day([text], travel_date) == is_operating_day([day], travel_date)


@given(
    unit_price=st.integers(min_value=0, max_value=50000),
    quantity=st.integers(min_value=1, max_value=20),
    amounts=st.lists(st.integers(min_value=1, max_value=200000), min_size=1, max_size=4),
)
def test_split_payment_accepted_only_when_exact(unit_price, quantity, amounts):
    methods = [PaymentMethodEntry(method=f"M{i}", amount=a) for i, a in enumerate(amounts)]
    expected = unit_price * quantity

    if sum(amounts) == expected:
        stored = validate_payment(PaymentType.HIBRIDO, None, methods, expected)
        assert sum(entry["amount"] for entry in stored) == expected
    else:
        with pytest.raises(PaymentMismatchError) as exc_info:
            validate_payment(PaymentType.HIBRIDO, None, methods, expected)
        assert exc_info.value.problem_details["difference"] == sum(amounts) - expected


@given(amounts=st.lists(st.integers(min_value=0, max_value=5000), min_size=1, max_size=4))
def test_split_payment_rejects_zero_amounts(amounts):
    methods = [PaymentMethodEntry(method=f"M{i}", amount=a) for i, a in enumerate(amounts)]
    total = sum(amounts)

    if 0 in amounts:
        with pytest.raises(ValidationError):
            validate_payment(PaymentType.HIBRIDO, None, methods, total)
    else:
        validate_payment(PaymentType.HIBRIDO, None, methods, total)


@pytest.mark.asyncio
@db_settings
@given(capacity=capacity_values, seat_requests=st.lists(seat_counts, min_size=1, max_size=12))
async def test_capacity_never_exceeded(
    test_session, catalog_factory, sale_request_factory, travel_date_on, capacity, seat_requests
):
    """Requests are admitted exactly while they fit; sold never passes capacity."""
    catalog = await catalog_factory(capacity=capacity)
    travel_date = travel_date_on("LUNES")
    service = SaleService(test_session)

    sold = 0
    for seats in seat_requests:
        fits = sold + seats <= capacity
        try:
            await service.create_sale(sale_request_factory(catalog, travel_date, quantity=seats), seller_ref="seller-001")
            assert fits
            sold += seats
        except CapacityExceededError as e:
            assert not fits
            assert e.available == capacity - sold

    availability = await AvailabilityService(test_session).check_availability(
        UUID(catalog["route_id"]),
        UUID(catalog["vessel_id"]),
        travel_date,
        catalog["departure_times"][0],
    )
    assert availability.sold == sold
    assert availability.sold <= capacity
    assert availability.available == capacity - sold


@pytest.mark.asyncio
@db_settings
@given(seat_requests=st.lists(seat_counts, min_size=1, max_size=5))
async def test_availability_moves_by_exact_quantity(
    test_session, catalog_factory, sale_request_factory, travel_date_on, seat_requests
):
    catalog = await catalog_factory(capacity=sum(seat_requests))
    travel_date = travel_date_on("MIERCOLES")
    service = SaleService(test_session)
    availability = AvailabilityService(test_session)

    async def available() -> int:
        result = await availability.check_availability(
            UUID(catalog["route_id"]),
            UUID(catalog["vessel_id"]),
            travel_date,
            catalog["departure_times"][0],
        )
        return result.available

    sale_ids = []
    for seats in seat_requests:
        before = await available()
        sale = await service.create_sale(sale_request_factory(catalog, travel_date, quantity=seats), seller_ref="seller-001")
        sale_ids.append((str(sale.id), seats))
        assert await available() == before - seats

    assert await available() == 0

    for index, (sale_id, seats) in enumerate(sale_ids):
        before = await available()
        kind = "VOID" if index % 2 == 0 else "REFUND"
        await service.void_sale(
            VoidSaleRequest(sale_id=sale_id, kind=kind, reason="Reprogramado", refund_amount=100),
            actor="supervisor-01",
        )
        assert await available() == before + seats

    assert await available() == sum(seat_requests)
