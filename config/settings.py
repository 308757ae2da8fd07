from __future__ import annotations

from pydantic_settings import BaseSettings


def split_csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./social_harvester.db"

    # Server
    API_PORT: int = 8001
    LOG_LEVEL: str = "INFO"

    # Crawl input
    PLATFORMS: str = "x"
    KEYWORDS: str = "artificial intelligence"
    MAX_RECORDS: int = 1000
    INCLUDE_IMAGES: bool = True
    MIN_TEXT_LENGTH: int = 50

    # Output
    OUTPUT_SINK: str = "database"  # "database" or "jsonl"
    OUTPUT_DIR: str = "./output"

    # Scheduling (0 disables the periodic job in `serve`)
    CRAWL_INTERVAL_MINUTES: int = 60

    # Fetching behaviour
    FETCH_TIMEOUT_SECONDS: float = 30.0
    DOM_WAIT_SECONDS: float = 10.0
    SCRAPE_REQUEST_DELAY: float = 1.0
    HEADLESS: bool = True
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    ACCEPT_LANGUAGE: str = "en-US,en;q=0.9"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def platform_list(self) -> list[str]:
        return split_csv(self.PLATFORMS)

    @property
    def keyword_list(self) -> list[str]:
        return split_csv(self.KEYWORDS)


settings = Settings()
