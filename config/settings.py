from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Database (Postgres in production, SQLite file for local dev)
    database_url: str = "sqlite+aiosqlite:///./provalo.db"

    # Alchemy (transfer indexer)
    alchemy_api_key: str = ""
    alchemy_max_rps: float = 25.0  # 0 disables pacing

    # CoinGecko (price provider)
    coingecko_api_key: str = ""  # demo key, sent as x-cg-demo-api-key
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_max_rps: float = 0.0  # 0 disables pacing

    # Caches
    transfer_cache_ttl_sec: float = 300.0
    price_cache_ttl_sec: float = 300.0

    # Enrichment
    default_max_count: int = 50
    price_concurrency: int = 8  # 0 = one lookup per transfer, all at once

    # HTTP API
    api_port: int = 8080
    api_jwt_secret: str = ""  # shared with the identity service that issues tokens
    api_cors_origins: str = "http://localhost:3000"  # comma-separated
    api_debug: bool = False

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False


settings = Settings()
