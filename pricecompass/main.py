import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pricecompass.config import settings
from pricecompass.dependencies import SessionStore
from pricecompass.routers import search
from pricecompass.services.model_invoker import ModelInvoker, build_client
from pricecompass.services.price_compass import PriceCompassService

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(name).setLevel(LOG_LEVEL)
# the SDK logs every request at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def build_service(client) -> PriceCompassService:
    invoker = ModelInvoker(client, web_search_max_uses=settings.web_search_max_uses)
    return PriceCompassService(invoker, settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = build_client(settings)
    app.state.price_compass = build_service(client)
    app.state.sessions = SessionStore(settings.max_sessions)
    logger.info(
        "Price Compass ready (analysis=%s, prices=%s, autocomplete=%s)",
        settings.analysis_model, settings.price_model, settings.autocomplete_model,
    )

    yield

    app.state.sessions.clear()
    await client.close()


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "credential_configured": bool(settings.anthropic_api_key)}


app.include_router(search.router)
