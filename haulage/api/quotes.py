from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from typing import Optional, List
from datetime import date

from haulage.api.deps import get_quote_store
from haulage.schemas.quote import QuoteCreate, QuoteUpdate, QuoteOut
from haulage.services.quote_store import QuoteStore
from haulage.core.http_utils import check_not_found
from haulage.core.response_builders import build_quote_response, build_quote_response_list
from haulage.core.enums import QuoteStatus

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("/", response_model=QuoteOut)
async def create_quote(
    payload: QuoteCreate,
    store: QuoteStore = Depends(get_quote_store),
):
    quote = await store.create(payload)
    return build_quote_response(quote)


@router.get("/", response_model=List[QuoteOut])
async def list_quotes(
    status: Optional[QuoteStatus] = Query(None),
    q: Optional[str] = Query(None, description="Match against stop locations and addresses"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: QuoteStore = Depends(get_quote_store),
):
    quotes = await store.list_quotes(status=status, query=q, limit=limit, offset=offset)
    return build_quote_response_list(quotes)


@router.get("/export.csv")
async def export_quotes(store: QuoteStore = Depends(get_quote_store)):
    content = await store.export_csv()
    filename = f"lagos_haulage_quotes_{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{quote_id}", response_model=QuoteOut)
async def get_quote(
    quote_id: str,
    store: QuoteStore = Depends(get_quote_store),
):
    quote = await store.get(quote_id)
    check_not_found(quote, "Quote", quote_id)

    return build_quote_response(quote)


@router.put("/{quote_id}", response_model=QuoteOut)
async def update_quote(
    quote_id: str,
    payload: QuoteUpdate,
    store: QuoteStore = Depends(get_quote_store),
):
    """Re-save an edited quote under the same identifier"""
    quote = await store.get(quote_id)
    check_not_found(quote, "Quote", quote_id)

    quote = await store.update(quote, payload)
    return build_quote_response(quote)


@router.delete("/{quote_id}")
async def delete_quote(
    quote_id: str,
    store: QuoteStore = Depends(get_quote_store),
):
    quote = await store.get(quote_id)
    check_not_found(quote, "Quote", quote_id)

    await store.delete(quote)

    return {"deleted": True}
