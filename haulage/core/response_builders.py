from typing import List, Optional
from haulage.core.enums import CycleOutcome
from haulage.models.quote import Quote
from haulage.schemas.pricing import CalculateResponse, NegotiationResult, PricingResult
from haulage.schemas.quote import QuoteOut


def build_quote_response(quote: Quote) -> QuoteOut:
    return QuoteOut(
        id=quote.id,
        stops=quote.stops,
        load_size=quote.load_size,
        load_weight=quote.load_weight,
        pickup_time=quote.pickup_time,
        distance=quote.distance,
        duration=quote.duration,
        price=quote.price,
        breakdown=quote.breakdown,
        status=quote.status,
        vehicle_specs=quote.vehicle_specs,
        fuel_data=quote.fuel_data,
        version=quote.version,
        created_at=quote.created_at,
        updated_at=quote.updated_at,
    )


def build_quote_response_list(quotes: list) -> List[QuoteOut]:
    return [build_quote_response(quote) for quote in quotes]


def build_pricing_response(
    result: Optional[PricingResult],
    negotiation: Optional[NegotiationResult] = None,
) -> CalculateResponse:
    if result is None:
        return CalculateResponse(status=CycleOutcome.NO_ROUTE)
    return CalculateResponse(
        status=CycleOutcome.PRICED,
        breakdown=result.breakdown,
        distance_km=result.distance_km,
        duration_minutes=result.duration_minutes,
        fuel_data=result.fuel_data,
        vehicle_specs=result.vehicle_specs,
        negotiation=negotiation,
    )
