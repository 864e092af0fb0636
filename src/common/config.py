from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    # OpenAI (text completion)
    openai_api_key: SecretStr = SecretStr("")
    openai_model: str = "gpt-4o-mini"
    # Set both to use an Azure deployment instead of api.openai.com
    azure_openai_endpoint: str = ""
    azure_openai_api_version: str = "2024-12-01-preview"

    # Serper (web search)
    serper_base_url: str = "https://google.serper.dev/search"
    serper_api_key: SecretStr = SecretStr("")

    # Contact databases, tried in this order
    hunter_base_url: str = "https://api.hunter.io/v2"
    hunter_api_key: SecretStr = SecretStr("")
    apollo_base_url: str = "https://api.apollo.io/v1"
    apollo_api_key: SecretStr = SecretStr("")
    clearbit_base_url: str = "https://company.clearbit.com/v2"
    clearbit_api_key: SecretStr = SecretStr("")

    # LLM settings
    temperature: float = 0.2
    max_tokens: int = 2000

    # Budgets (seconds)
    enrichment_timeout: float = 120.0
    hybrid_stage_timeout: float = 100.0
    ai_stage_timeout: float = 8.0
    external_stage_timeout: float = 8.0
    email_enrichment_timeout: float = 60.0
    provider_request_timeout: float = 10.0
    search_delay: float = 0.5

    # Result cache
    cache_ttl: int = 3600
    cache_max_size: int = 1024

    # Logging
    log_level: str = "INFO"
    log_format: str = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key.get_secret_value())

    @property
    def serper_configured(self) -> bool:
        return bool(self.serper_api_key.get_secret_value())


config = Config()
