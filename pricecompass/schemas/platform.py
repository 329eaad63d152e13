from enum import StrEnum
from urllib.parse import quote

from pydantic import BaseModel


class Currency(StrEnum):
    MYR = "MYR"
    USD = "USD"
    JPY = "JPY"
    SGD = "SGD"
    HKD = "HKD"
    EUR = "EUR"
    GBP = "GBP"
    AUD = "AUD"


class PlatformConfig(BaseModel):
    id: str
    name: str
    url_template: str  # "{query}" is replaced by the URL-encoded search term
    color: str
    description: str
    price_label: str | None = None  # name used in the price prompt; None = link-only platform
    price_hint: str | None = None
    price_status: str | None = None

    model_config = {"frozen": True}

    @property
    def has_price_lookup(self) -> bool:
        return self.price_label is not None

    def search_url(self, query: str) -> str:
        return self.url_template.format(query=quote(query.strip(), safe=""))


class PlatformLink(BaseModel):
    id: str
    name: str
    color: str
    description: str
    url: str
