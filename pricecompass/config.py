import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic_settings import BaseSettings

from pricecompass.schemas.platform import Currency

_ENV_FILE = Path.home() / "env" / ".env.dev"
_env_vars = dotenv_values(str(_ENV_FILE)) if _ENV_FILE.exists() else {}


class Settings(BaseSettings):
    app_name: str = "Price Compass"
    debug: bool = False
    log_level: str = "INFO"
    anthropic_api_key: str = ""
    autocomplete_model: str = "claude-haiku-4-5"
    analysis_model: str = "claude-sonnet-4-5-20250929"
    price_model: str = "claude-sonnet-4-5-20250929"
    autocomplete_max_tokens: int = 256
    analysis_max_tokens: int = 2048
    price_max_tokens: int = 2048
    web_search_max_uses: int = 5
    request_timeout: float = 90.0
    default_currency: Currency = Currency.MYR
    autocomplete_debounce: float = 0.3
    max_sessions: int = 1000

    model_config = {
        "env_prefix": "PRICECOMPASS_",
        "env_file": ".env",
        "extra": "ignore",
    }

    def model_post_init(self, __context):
        if not self.anthropic_api_key:
            self.anthropic_api_key = os.environ.get("ANTHROPIC_API_KEY") or _env_vars.get("ANTHROPIC_API_KEY", "")


settings = Settings()
