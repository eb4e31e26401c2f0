"""Quote persistence, search and CSV export."""
import csv
import io
import logging
import uuid
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm.exc import StaleDataError

from haulage.core.enums import QuoteStatus
from haulage.core.exceptions import QuoteVersionConflict, StoreUnavailableError
from haulage.core.metrics import track_db_operation
from haulage.models.quote import Quote
from haulage.schemas.quote import QuoteCreate, QuoteUpdate

logger = logging.getLogger(__name__)

CSV_HEADERS = ["ID", "Route", "Load Size", "Price", "Created At", "Status"]
JSON_FIELDS = {"stops", "breakdown", "vehicle_specs", "fuel_data"}


def new_quote_id() -> str:
    return f"quote_{uuid.uuid4().hex[:12]}"


def build_search_text(stops: Iterable[dict]) -> str:
    parts = []
    for stop in stops:
        parts.append(str(stop.get("lga", "")).lower())
        parts.append(str(stop.get("address", "")).lower())
    return "\n".join(parts)


def render_route(stops: Iterable[dict]) -> str:
    return " → ".join(f"{stop.get('type')}: {stop.get('lga')}" for stop in stops)


def format_naira(amount: int) -> str:
    return f"₦{amount:,}"


class QuoteStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except StaleDataError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Quote {operation} failed: {e}")
            raise StoreUnavailableError("quote", operation, str(e)) from e

    @track_db_operation("select", "quotes")
    async def list_quotes(
        self,
        status: Optional[QuoteStatus] = None,
        query: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Quote]:
        q = select(Quote)
        if status:
            q = q.where(Quote.status == status)
        if query:
            q = q.where(Quote.search_text.contains(query.lower(), autoescape=True))
        q = q.order_by(Quote.created_at.desc()).offset(offset)
        if limit is not None:
            q = q.limit(limit)

        try:
            res = await self.db.execute(q)
        except SQLAlchemyError as e:
            logger.error(f"Quote listing failed: {e}")
            raise StoreUnavailableError("quotes", "load", str(e)) from e
        return list(res.scalars().all())

    async def search(self, query: str) -> List[Quote]:
        """Quotes with any stop whose location or address contains ``query``."""
        return await self.list_quotes(query=query)

    @track_db_operation("select", "quotes")
    async def get(self, quote_id: str) -> Optional[Quote]:
        try:
            res = await self.db.execute(select(Quote).where(Quote.id == quote_id))
        except SQLAlchemyError as e:
            logger.error(f"Quote lookup failed for {quote_id}: {e}")
            raise StoreUnavailableError("quote", "load", str(e)) from e
        return res.scalars().first()

    @track_db_operation("insert", "quotes")
    async def create(self, payload: QuoteCreate, quote_id: Optional[str] = None) -> Quote:
        data = payload.model_dump(mode="json")
        quote = Quote(
            id=quote_id or new_quote_id(),
            stops=data["stops"],
            load_size=payload.load_size,
            load_weight=payload.load_weight,
            pickup_time=payload.pickup_time,
            distance=payload.distance,
            duration=payload.duration,
            price=payload.price,
            breakdown=data["breakdown"],
            status=payload.status,
            vehicle_specs=data["vehicle_specs"],
            fuel_data=data["fuel_data"],
            search_text=build_search_text(data["stops"]),
        )
        self.db.add(quote)
        await self._commit("save")
        await self.db.refresh(quote)
        logger.info(f"Saved quote {quote.id} at {quote.price}")
        return quote

    @track_db_operation("update", "quotes")
    async def update(self, quote: Quote, payload: QuoteUpdate) -> Quote:
        quote_id = quote.id
        current_version = quote.version
        expected_version = payload.version
        if expected_version is not None and expected_version != current_version:
            raise QuoteVersionConflict(quote_id, expected_version, current_version)

        as_json = payload.model_dump(mode="json", exclude_unset=True, exclude={"version"})
        typed = payload.model_dump(exclude_unset=True, exclude={"version"})
        for field in as_json:
            setattr(quote, field, as_json[field] if field in JSON_FIELDS else typed[field])
        if "stops" in as_json:
            quote.search_text = build_search_text(as_json["stops"])

        self.db.add(quote)
        try:
            await self._commit("save")
        except StaleDataError as e:
            raise QuoteVersionConflict(quote_id, current_version, -1) from e
        await self.db.refresh(quote)
        logger.info(f"Updated quote {quote_id} to version {quote.version}")
        return quote

    @track_db_operation("delete", "quotes")
    async def delete(self, quote: Quote) -> None:
        quote_id = quote.id
        await self.db.delete(quote)
        await self._commit("delete")
        logger.info(f"Deleted quote {quote_id}")

    async def export_csv(self) -> str:
        quotes = await self.list_quotes()
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for quote in quotes:
            writer.writerow([
                quote.id,
                render_route(quote.stops),
                str(quote.load_size),
                format_naira(quote.price),
                quote.created_at.date().isoformat(),
                str(quote.status),
            ])
        return buffer.getvalue()
