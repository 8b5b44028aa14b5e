from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    app_name: str = "Unveil Matching"
    log_level: str = "INFO"

    # Empty means the bundled sample catalog
    catalog_path: str = ""

    # Scoring weights, must add up to 1.0
    level_weight: float = 0.25
    interest_weight: float = 0.25
    location_weight: float = 0.15
    platforms_weight: float = 0.15
    content_type_weight: float = 0.10
    must_attend_event_weight: float = 0.05
    exclusive_weight: float = 0.05

    # Split of the location weight between country and city
    country_share: float = 0.6
    city_share: float = 0.4

    feed_min_score: float = 0.6
    detail_min_score: float = 0.4

    campaign_ttl_days: int = 30
    response_delay_seconds: float = 2.0
    enforce_single_open_campaign: bool = False

    class Config:
        env_file = ".env"
        env_prefix = "UNVEIL_"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
