"""Shared fakes: a scripted model invoker and service wiring."""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from pricecompass.config import Settings
from pricecompass.schemas.insight import WebSource
from pricecompass.services.model_invoker import ModelReply
from pricecompass.services.price_compass import PriceCompassService


class FakeInvoker:
    """Stands in for ModelInvoker. `responder(prompt)` returns a reply or raises."""

    def __init__(self, responder):
        self.responder = responder
        self.calls = []

    async def invoke(self, prompt, model, use_search=False, max_tokens=None):
        self.calls.append({"prompt": prompt, "model": model, "use_search": use_search})
        result = self.responder(prompt)
        if isinstance(result, Exception):
            raise result
        return result


def reply(text, *sources):
    return ModelReply(raw_text=text, citations=tuple(WebSource(title=t, uri=u) for t, u in sources))


def is_analysis_prompt(prompt: str) -> bool:
    return prompt.startswith("Analyze item")


@pytest.fixture
def test_settings():
    return Settings(
        anthropic_api_key="test-key",
        autocomplete_model="fast-model",
        analysis_model="smart-model",
        price_model="price-model",
        autocomplete_debounce=0,
    )


@pytest.fixture
def make_service(test_settings):
    def _make(responder):
        invoker = FakeInvoker(responder)
        return PriceCompassService(invoker, test_settings), invoker
    return _make


@pytest.fixture
def fake_anthropic():
    """Anthropic-shaped client whose messages.create is an AsyncMock."""
    def _make(blocks=None, error=None):
        create = AsyncMock()
        if error is not None:
            create.side_effect = error
        else:
            create.return_value = SimpleNamespace(content=blocks or [])
        return SimpleNamespace(messages=SimpleNamespace(create=create))
    return _make
