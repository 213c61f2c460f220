from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Provider credentials; an empty key disables the adapter
    alpha_vantage_api_key: str = ""
    finnhub_api_key: str = ""
    mistral_api_key: str = ""
    gemini_api_key: str = ""

    # Keyless adapters
    yahoo_enabled: bool = True
    marketcap_enabled: bool = True
    wikipedia_enabled: bool = True
    clearbit_enabled: bool = True

    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    mistral_base_url: str = "https://api.mistral.ai/v1/chat/completions"
    mistral_model: str = "mistral-medium"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_model: str = "gemini-1.5-flash"
    wikipedia_base_url: str = "https://en.wikipedia.org"
    marketcap_base_url: str = "https://companiesmarketcap.com"
    clearbit_base_url: str = "https://logo.clearbit.com"

    provider_timeout_seconds: float = 10.0
    cache_ttl_minutes: int = 60
    no_data_ttl_minutes: int = 10
    serve_stale: bool = True

    environment: str = "production"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = 5000

    class Config:
        env_file = ".env"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"
