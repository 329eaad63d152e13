import logging

from pydantic import ValidationError

from pricecompass.config import Settings
from pricecompass.schemas.insight import (
    FallbackReason,
    ItemAnalysis,
    PriceInsight,
    WebSource,
)
from pricecompass.services.json_extraction import ExtractionFailed, extract_json
from pricecompass.services.model_invoker import InvocationFailed, ModelInvoker
from pricecompass.services.prompts import (
    MAX_SUGGESTIONS,
    MIN_AUTOCOMPLETE_LENGTH,
    TaskKind,
    build_prompt,
)

logger = logging.getLogger(__name__)

ANALYSIS_FALLBACK_DESCRIPTION = "Could not analyze details automatically."
PRICE_FETCH_FAILED_OVERVIEW = (
    "Could not fetch live prices. Please check your API key or network connection."
)
PRICE_PARSE_FAILED_OVERVIEW = "Could not parse price data."
EMPTY_QUERY_OVERVIEW = "Enter an item name to look up prices."
NO_DETAILS_OVERVIEW = "No details available."


def degraded_analysis(query: str, sources: list[WebSource] | None = None) -> ItemAnalysis:
    """Renderable stand-in used when the model replied but its output was unusable."""
    return ItemAnalysis(
        name=query,
        category="Unknown",
        description=ANALYSIS_FALLBACK_DESCRIPTION,
        estimated_value="N/A",
        search_tips=[query],
        versions=[],
        sources=sources or [],
        fallback_reason=FallbackReason.EXTRACTION_FAILED,
    )


class PriceCompassService:
    """Autocomplete, item analysis and price lookup backed by a web-searching model."""

    def __init__(self, invoker: ModelInvoker, settings: Settings):
        self.invoker = invoker
        self.settings = settings

    def _currency_or_default(self, currency: str | None) -> str:
        return (currency or "").strip() or self.settings.default_currency.value

    async def get_autocomplete_suggestions(self, partial_query: str) -> list[str]:
        """Up to five title suggestions. Never raises; failures give an empty list."""
        partial_query = (partial_query or "").strip()
        if len(partial_query) < MIN_AUTOCOMPLETE_LENGTH:
            return []

        try:
            prompt = build_prompt(TaskKind.AUTOCOMPLETE, partial_query)
            reply = await self.invoker.invoke(
                prompt,
                model=self.settings.autocomplete_model,
                max_tokens=self.settings.autocomplete_max_tokens,
            )
            data = extract_json(reply.raw_text or "[]")
        except (InvocationFailed, ExtractionFailed) as exc:
            # stay quiet: a missing dropdown must not disrupt typing
            logger.debug("Autocomplete failed for %r: %s", partial_query, exc)
            return []
        except Exception:
            logger.exception("Unexpected autocomplete failure for: %s", partial_query)
            return []

        if not isinstance(data, list):
            return []
        suggestions = [s.strip() for s in data if isinstance(s, str) and s.strip()]
        suggestions = suggestions[:MAX_SUGGESTIONS]
        logger.info(
            "Autocomplete for %r via %s: %d suggestions",
            partial_query, self.settings.autocomplete_model, len(suggestions),
        )
        return suggestions

    async def analyze_item(self, query: str, currency: str | None) -> ItemAnalysis | None:
        """Identify the item. None means the model could not be reached at all."""
        query = (query or "").strip()
        if not query:
            return None
        currency = self._currency_or_default(currency)

        prompt = build_prompt(TaskKind.ITEM_ANALYSIS, query, currency)
        try:
            reply = await self.invoker.invoke(
                prompt,
                model=self.settings.analysis_model,
                use_search=True,
                max_tokens=self.settings.analysis_max_tokens,
            )
        except Exception:
            logger.exception("Item analysis failed for: %s", query)
            return None

        sources = list(reply.citations)
        try:
            data = extract_json(reply.raw_text or "{}")
        except ExtractionFailed as exc:
            logger.warning("Item analysis JSON extraction failed for %r: %s", query, exc)
            return degraded_analysis(query, sources)

        if not isinstance(data, dict):
            logger.warning("Item analysis reply for %r was %s, not an object", query, type(data).__name__)
            return degraded_analysis(query, sources)

        data = {**data, "sources": sources}
        if not data.get("name"):
            data["name"] = query
        try:
            analysis = ItemAnalysis.model_validate(data)
        except ValidationError as exc:
            logger.warning("Item analysis reply for %r did not validate: %s", query, exc)
            return degraded_analysis(query, sources)

        logger.info(
            "Analyzed %r as %r (%d versions, %d sources)",
            query, analysis.name, len(analysis.versions), len(sources),
        )
        return analysis

    async def search_item_prices(self, query: str, currency: str | None) -> PriceInsight:
        """Per-platform prices. Always returns a renderable insight."""
        query = (query or "").strip()
        if not query:
            return PriceInsight(
                overview=EMPTY_QUERY_OVERVIEW,
                fallback_reason=FallbackReason.INVALID_INPUT,
            )
        currency = self._currency_or_default(currency)

        prompt = build_prompt(TaskKind.PRICE_LOOKUP, query, currency)
        try:
            reply = await self.invoker.invoke(
                prompt,
                model=self.settings.price_model,
                use_search=True,
                max_tokens=self.settings.price_max_tokens,
            )
        except Exception as exc:
            logger.exception("Price search failed for: %s", query)
            reason = FallbackReason.INVOCATION_FAILED
            if isinstance(exc, InvocationFailed) and exc.is_credential_error:
                reason = FallbackReason.CREDENTIALS
            return PriceInsight(overview=PRICE_FETCH_FAILED_OVERVIEW, fallback_reason=reason)

        sources = list(reply.citations)
        try:
            data = extract_json(reply.raw_text or "{}")
            if not isinstance(data, dict):
                raise ExtractionFailed(reply.raw_text)
            insight = PriceInsight.model_validate({
                "prices": data.get("prices") or [],
                "overview": data.get("overview") or NO_DETAILS_OVERVIEW,
                "sources": sources,
            })
        except (ExtractionFailed, ValidationError) as exc:
            logger.warning("Price search JSON parsing failed for %r: %s", query, exc)
            return PriceInsight(
                overview=reply.raw_text or PRICE_PARSE_FAILED_OVERVIEW,
                sources=sources,
                fallback_reason=FallbackReason.EXTRACTION_FAILED,
            )

        found = sum(1 for p in insight.prices if p.is_available)
        logger.info("Price search for %r: %d/%d platforms priced", query, found, len(insight.prices))
        return insight
