from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_host: str = "0.0.0.0"
    app_port: int = 3001
    log_level: str = "INFO"

    # Only URLs on this domain (or its subdomains) are accepted by the API
    target_domain: str = "opensooq.com"

    # HTTP layer
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    request_timeout: float = 30.0
    max_retries: int = 3
    initial_retry_delay: float = 0.3

    # Crawl pacing
    concurrency: int = 5
    inter_batch_delay: float = 0.5
    inter_page_delay: float = 0.5


settings = Settings()
