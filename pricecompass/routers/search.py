from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, Response

from pricecompass.config import settings
from pricecompass.dependencies import (
    SessionStore,
    get_price_compass,
    get_search_session,
    get_sessions,
)
from pricecompass.platforms import platform_links
from pricecompass.schemas.platform import Currency
from pricecompass.services.price_compass import PriceCompassService
from pricecompass.viewmodels.search_vm import SearchSession

router = APIRouter(prefix="/api")


@router.post("/sessions")
async def create_session(
    service: PriceCompassService = Depends(get_price_compass),
    sessions: SessionStore = Depends(get_sessions),
):
    """Hand out a session id; clients pass it back as ?sid= so stale replies can be dropped."""
    session = SearchSession(
        service, settings.default_currency.value, debounce=settings.autocomplete_debounce
    )
    return {"sid": sessions.issue(session)}


@router.get("/currencies")
async def list_currencies():
    return {"currencies": [c.value for c in Currency], "default": settings.default_currency.value}


@router.get("/platforms")
async def list_platforms(q: str = ""):
    return JSONResponse([link.model_dump() for link in platform_links(q)])


@router.get("/open-all")
async def open_all(q: str = ""):
    """Explicit command for the client to open every platform search in a new tab."""
    if not q.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")
    return {"command": "open_urls", "urls": [link.url for link in platform_links(q)]}


@router.get("/autocomplete")
async def autocomplete(q: str = "", session: SearchSession = Depends(get_search_session)):
    suggestions = await session.suggest(q)
    if suggestions is None:
        # a newer keystroke owns the dropdown now
        return Response(status_code=204)
    return {"query": q, "suggestions": suggestions}


@router.get("/search")
async def search(
    q: str = "",
    currency: Currency | None = None,
    session: SearchSession = Depends(get_search_session),
):
    if not q.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")
    vm = await session.submit(q, currency.value if currency else None)
    if vm is None:
        return Response(status_code=204)
    return JSONResponse(vm.to_dict())
