from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Loads and validates environment variables."""

    CHROMA_HOST: str = "localhost"
    CHROMA_PORT: int = 8000
    PRODUCTS_COLLECTION: str = "products"
    SETTINGS_COLLECTION: str = "site_settings"
    SITE_CONFIG_ID: str = "config"

    CATALOG_CACHE_TTL_SECONDS: float = 300.0

    COMPLETION_BASE_URL: str = "https://api.groq.com/openai/v1"
    COMPLETION_API_KEY: str = ""
    COMPLETION_MODEL: str = "llama-3.1-8b-instant"
    COMPLETION_TEMPERATURE: float = 0.8
    COMPLETION_MAX_TOKENS: int = 300

    STORE_NAME: str = "Farooq Pharmacy"
    STORE_CITY: str = "Dera Ghazi Khan, Pakistan"
    DEFAULT_WHATSAPP_NUMBER: str = "923310076524"
    SUPPORT_PHONE: str = "03310076524"

    STOREFRONT_URL: str = "http://localhost:8080"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
