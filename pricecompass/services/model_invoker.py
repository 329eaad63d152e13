import logging
from dataclasses import dataclass, field

import anthropic
import httpx

from pricecompass.config import Settings
from pricecompass.schemas.insight import WebSource

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL = "web_search_20250305"

_CREDENTIAL_MARKERS = ("401", "403", "api key", "api_key", "x-api-key")


class InvocationFailed(Exception):
    """The model call failed on transport, auth, quota or server side."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_credential_error(self) -> bool:
        """Best-effort guess that the API key is missing, wrong or not permitted."""
        cause = self.__cause__
        if isinstance(cause, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
            return True
        message = str(self).lower()
        if self.status_code == 400:
            return "api key" in message or "api_key" in message
        if self.status_code is not None:
            return False
        return any(marker in message for marker in _CREDENTIAL_MARKERS)


@dataclass(frozen=True)
class ModelReply:
    raw_text: str
    citations: tuple[WebSource, ...] = field(default_factory=tuple)


def build_client(settings: Settings) -> anthropic.AsyncAnthropic:
    """Client for the invoker. Automatic retries are off: one call per request."""
    if not settings.anthropic_api_key:
        logger.warning("No Anthropic API key configured; model calls will fail")
    return anthropic.AsyncAnthropic(
        api_key=settings.anthropic_api_key,
        max_retries=0,
        timeout=settings.request_timeout,
    )


class ModelInvoker:
    def __init__(
        self,
        client: anthropic.AsyncAnthropic,
        max_tokens: int = 1024,
        web_search_max_uses: int = 5,
    ):
        self.client = client
        self.max_tokens = max_tokens
        self.web_search_max_uses = web_search_max_uses

    async def invoke(
        self,
        prompt: str,
        model: str,
        use_search: bool = False,
        max_tokens: int | None = None,
    ) -> ModelReply:
        kwargs = {
            "model": model,
            "max_tokens": max_tokens or self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if use_search:
            kwargs["tools"] = [{
                "type": WEB_SEARCH_TOOL,
                "name": "web_search",
                "max_uses": self.web_search_max_uses,
            }]

        try:
            response = await self.client.messages.create(**kwargs)
        except anthropic.APIStatusError as exc:
            raise InvocationFailed(str(exc), status_code=exc.status_code) from exc
        except (anthropic.APIError, httpx.HTTPError) as exc:
            raise InvocationFailed(str(exc)) from exc

        return ModelReply(
            raw_text=self._collect_text(response.content),
            citations=tuple(self._collect_citations(response.content)),
        )

    def _collect_text(self, blocks) -> str:
        # with web search the answer arrives as several text blocks around the tool calls
        return "".join(
            block.text for block in blocks
            if getattr(block, "type", None) == "text" and block.text
        ).strip()

    def _collect_citations(self, blocks) -> list[WebSource]:
        citations = []
        for block in blocks:
            if getattr(block, "type", None) != "web_search_tool_result":
                continue
            results = getattr(block, "content", None)
            if not isinstance(results, list):
                # tool error payload, nothing to cite
                continue
            for result in results:
                uri = getattr(result, "url", None)
                if not uri:
                    continue
                citations.append(WebSource(title=getattr(result, "title", None) or uri, uri=uri))
        return citations
