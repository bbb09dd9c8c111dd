from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Chat-completion backend (generic pages)
    openai_api_key: str = ""
    openai_base_url: str = ""
    chat_model: str = "gpt-4o-mini"
    chat_temperature: float = 0.2

    # Conversational backend (discussion posts)
    anthropic_api_key: str = ""
    discussion_model: str = "claude-3-5-sonnet-20240620"

    summary_max_tokens: int = 4096

    # Search
    search_provider: str = "searxng"  # searxng | tavily
    searxng_url: str = "http://localhost:8080"
    search_language: str = "en"
    tavily_api_key: str = ""
    max_search_results: int = 10
    rephrase_queries: bool = True

    # Rendering
    fetch_strategy: str = "browser"  # browser | proxy
    render_proxy_url: str = "https://api.hasdata.com/scrape/web"
    render_proxy_api_key: str = ""
    render_timeout_seconds: float = 60.0
    browser_user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )
    discussion_scrape_enabled: bool = True

    # Fan-out
    # Upper bound on URLs returned by discovery.
    max_candidate_urls: int = Field(default=5, ge=0, le=5)
    max_parallel_urls: int = 5

    # Summary cache (PostgreSQL). Empty keeps summaries in process memory.
    database_url: str = ""

    # Alerting
    slack_bot_token: str = ""
    slack_error_channel: str = ""

    # App
    cors_origins: str = "*"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build the process-wide settings once."""
    return Settings()
