"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, Field


class Settings(BaseModel):
    api_url: str = "http://localhost:5000/api"
    api_timeout: float = Field(default=5.0, gt=0)
    trending_limit: int = Field(default=5, ge=1)
    low_stock_threshold: int = Field(default=10, ge=0)
    cache_size: int = Field(default=500, ge=1)

    @classmethod
    def from_env(cls) -> Settings:
        values = {
            "api_url": os.environ.get("CAMPUS_EVENTS_API_URL"),
            "api_timeout": os.environ.get("CAMPUS_EVENTS_API_TIMEOUT"),
            "trending_limit": os.environ.get("CAMPUS_EVENTS_TRENDING_LIMIT"),
            "low_stock_threshold": os.environ.get("CAMPUS_EVENTS_LOW_STOCK_THRESHOLD"),
            "cache_size": os.environ.get("CAMPUS_EVENTS_CACHE_SIZE"),
        }
        return cls(**{k: v for k, v in values.items() if v is not None})


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
