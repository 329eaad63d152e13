import re
from enum import StrEnum

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

# Normalized price/status strings that mark an entry as "no price found"
_UNAVAILABLE_STATUSES = {"notfound", "checkwebsite", "unavailable", "nodata"}
_PLACEHOLDER_PRICES = {"", "na", "none", "unknown"}

_RESULT_CONFIG = {
    "frozen": True,
    "populate_by_name": True,
    "coerce_numbers_to_str": True,
    "extra": "ignore",
}


class FallbackReason(StrEnum):
    INVALID_INPUT = "invalid_input"
    INVOCATION_FAILED = "invocation_failed"
    CREDENTIALS = "credentials"
    EXTRACTION_FAILED = "extraction_failed"


class WebSource(BaseModel):
    title: str
    uri: str

    model_config = _RESULT_CONFIG


def _without_nulls(value):
    if isinstance(value, dict):
        return {k: v for k, v in value.items() if v is not None}
    return value


def _valid_rows(model: type[BaseModel], rows: list, required: str) -> list:
    """Validate list entries one at a time, skipping the ones that do not fit."""
    kept = []
    for row in rows:
        if isinstance(row, model):
            kept.append(row)
            continue
        if not isinstance(row, dict) or not row.get(required):
            continue
        try:
            kept.append(model.model_validate(row))
        except ValidationError:
            continue
    return kept


class RegionVersion(BaseModel):
    region: str
    languages: str = ""
    source_url: str = Field(default="", alias="sourceUrl")

    model_config = _RESULT_CONFIG

    @model_validator(mode="before")
    @classmethod
    def _strip_nulls(cls, data):
        return _without_nulls(data)

    @field_validator("languages", mode="before")
    @classmethod
    def _join_languages(cls, value):
        if isinstance(value, list):
            return ", ".join(str(lang) for lang in value)
        return value


class ItemAnalysis(BaseModel):
    name: str
    category: str = ""
    description: str = ""
    estimated_value: str = Field(default="", alias="estimatedValue")
    search_tips: list[str] = Field(default_factory=list, alias="searchTips")
    versions: list[RegionVersion] = Field(default_factory=list)
    sources: list[WebSource] = Field(default_factory=list)
    fallback_reason: FallbackReason | None = Field(default=None, alias="fallbackReason")

    model_config = _RESULT_CONFIG

    @model_validator(mode="before")
    @classmethod
    def _strip_nulls(cls, data):
        return _without_nulls(data)

    @field_validator("search_tips", mode="before")
    @classmethod
    def _drop_blank_tips(cls, value):
        if not isinstance(value, list):
            return []
        return [str(tip).strip() for tip in value if isinstance(tip, (str, int, float)) and str(tip).strip()]

    @field_validator("versions", mode="before")
    @classmethod
    def _keep_region_rows(cls, value):
        # the model occasionally emits null or prose for regions it could not verify
        if not isinstance(value, list):
            return []
        return _valid_rows(RegionVersion, value, required="region")


class PlatformPrice(BaseModel):
    platform: str
    price: str = "---"
    status: str = "Check Website"

    model_config = _RESULT_CONFIG

    @model_validator(mode="before")
    @classmethod
    def _strip_nulls(cls, data):
        # null price/status fall back to the placeholders
        return _without_nulls(data)

    @property
    def is_available(self) -> bool:
        """False when the model reported no price, so the row should be greyed out."""
        status = re.sub(r"[^a-z]", "", self.status.lower())
        if status in _UNAVAILABLE_STATUSES:
            return False
        price = re.sub(r"[^a-z0-9]", "", self.price.lower())
        return price not in _PLACEHOLDER_PRICES


class PriceInsight(BaseModel):
    prices: list[PlatformPrice] = Field(default_factory=list)
    overview: str = "No details available."
    sources: list[WebSource] = Field(default_factory=list)
    fallback_reason: FallbackReason | None = Field(default=None, alias="fallbackReason")

    model_config = _RESULT_CONFIG

    @model_validator(mode="before")
    @classmethod
    def _strip_nulls(cls, data):
        return _without_nulls(data)

    @field_validator("prices", mode="before")
    @classmethod
    def _drop_malformed_prices(cls, value):
        if not isinstance(value, list):
            return []
        return _valid_rows(PlatformPrice, value, required="platform")
