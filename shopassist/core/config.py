from functools import lru_cache
from typing import Literal, Optional
import os
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "ShopAssist"
    DEBUG: bool = False

    # Catalog seed (JSON with "stores" and "products" rows); empty catalog when unset
    CATALOG_PATH: Optional[str] = None

    # Search
    search_max_results: int = Field(default=50, ge=1, le=50)

    # Assistant policies
    add_to_cart_ambiguity_threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)  # off = always take top match
    stock_assume_in_stock_on_error: bool = True

    # Basket split
    delivery_fee_per_store: float = Field(default=5.0, ge=0.0)
    default_eta: str = "30-45 min"

    # API
    api_prefix: str = "/api"

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
