import asyncio
import logging
from dataclasses import dataclass, field

from pricecompass.platforms import PLATFORMS, find_price
from pricecompass.schemas.insight import FallbackReason, ItemAnalysis, PlatformPrice, PriceInsight
from pricecompass.schemas.platform import PlatformConfig
from pricecompass.services.price_compass import PriceCompassService
from pricecompass.services.prompts import MIN_AUTOCOMPLETE_LENGTH

logger = logging.getLogger(__name__)

SEARCH_FAILED_MESSAGE = "Failed to complete analysis. Please try again."
CREDENTIAL_HINT = (
    "The model service rejected the request. Check that ANTHROPIC_API_KEY is set and valid."
)


@dataclass
class PlatformRow:
    platform: PlatformConfig
    url: str
    price: PlatformPrice | None = None

    @property
    def is_available(self) -> bool:
        return self.price is not None and self.price.is_available

    def to_dict(self) -> dict:
        return {
            "id": self.platform.id,
            "name": self.platform.name,
            "color": self.platform.color,
            "description": self.platform.description,
            "url": self.url,
            "price": self.price.price if self.price else None,
            "status": self.price.status if self.price else None,
            "available": self.is_available,
        }


@dataclass
class SearchViewModel:
    query: str = ""
    currency: str = ""
    analysis: ItemAnalysis | None = None
    price_insight: PriceInsight | None = None
    rows: list[PlatformRow] = field(default_factory=list)
    error: str | None = None
    credential_hint: str | None = None

    @classmethod
    async def search(
        cls, service: PriceCompassService, query: str, currency: str
    ) -> "SearchViewModel":
        # analysis and prices are independent; neither waits on the other
        analysis, price_insight = await asyncio.gather(
            service.analyze_item(query, currency),
            service.search_item_prices(query, currency),
        )
        return cls.build(query, currency, analysis, price_insight)

    @classmethod
    def build(
        cls,
        query: str,
        currency: str,
        analysis: ItemAnalysis | None,
        price_insight: PriceInsight | None,
    ) -> "SearchViewModel":
        prices = price_insight.prices if price_insight else []
        rows = [
            PlatformRow(platform=p, url=p.search_url(query), price=find_price(p, prices))
            for p in PLATFORMS
        ]

        error = None
        hint = None
        if analysis is None and not prices:
            error = SEARCH_FAILED_MESSAGE
            if price_insight and price_insight.fallback_reason == FallbackReason.CREDENTIALS:
                hint = CREDENTIAL_HINT

        return cls(
            query=query,
            currency=currency,
            analysis=analysis,
            price_insight=price_insight,
            rows=rows,
            error=error,
            credential_hint=hint,
        )

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "currency": self.currency,
            "analysis": self.analysis.model_dump(mode="json", by_alias=True) if self.analysis else None,
            "priceInsight": (
                self.price_insight.model_dump(mode="json", by_alias=True) if self.price_insight else None
            ),
            "platforms": [row.to_dict() for row in self.rows],
            "error": self.error,
            "credentialHint": self.credential_hint,
        }


class SearchSession:
    """Per-client search state. Results of superseded requests are dropped, not cancelled."""

    def __init__(self, service: PriceCompassService, currency: str, debounce: float = 0.3):
        self.service = service
        self.currency = currency
        self.debounce = debounce
        self.query = ""
        self.is_searching = False
        self.result: SearchViewModel | None = None
        self.suggestions: list[str] = []
        self._search_generation = 0
        self._suggest_generation = 0

    def is_current_search(self, generation: int) -> bool:
        return generation == self._search_generation

    def is_current_suggestion(self, generation: int) -> bool:
        return generation == self._suggest_generation

    async def submit(self, query: str, currency: str | None = None) -> SearchViewModel | None:
        """Run a dual search; returns None when empty or overtaken by a newer submit."""
        term = (query or "").strip()
        if not term:
            return None
        if currency:
            self.currency = currency

        self._search_generation += 1
        generation = self._search_generation
        # a new search always starts from a clean slate
        self.query = term
        self.result = None
        self.is_searching = True
        # pending suggestions belong to the old input
        self._suggest_generation += 1
        self.suggestions = []

        try:
            vm = await SearchViewModel.search(self.service, term, self.currency)
        finally:
            if self.is_current_search(generation):
                self.is_searching = False

        if not self.is_current_search(generation):
            logger.debug("Dropping stale search result for %r", term)
            return None
        self.result = vm
        return vm

    async def suggest(self, partial_query: str, debounce: float | None = None) -> list[str] | None:
        """Debounced autocomplete; returns None when a later keystroke superseded this one."""
        self._suggest_generation += 1
        generation = self._suggest_generation

        if len((partial_query or "").strip()) < MIN_AUTOCOMPLETE_LENGTH:
            self.suggestions = []
            return []

        delay = self.debounce if debounce is None else debounce
        if delay > 0:
            await asyncio.sleep(delay)
        if not self.is_current_suggestion(generation):
            return None

        suggestions = await self.service.get_autocomplete_suggestions(partial_query)

        if not self.is_current_suggestion(generation):
            logger.debug("Dropping stale suggestions for %r", partial_query)
            return None
        self.suggestions = suggestions
        return suggestions
