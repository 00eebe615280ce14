from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""
    
    # App
    APP_NAME: str = "MAJHI COSTING"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    
    # Display
    CURRENCY_SYMBOL: str = "₹"
    COST_DECIMAL_PLACES: int = 2
    
    # Dishes above this food cost % are flagged
    FOOD_COST_ALERT_PERCENT: Decimal = Decimal("35")
    
    # Seed the in-process snapshot with the demo kitchen
    LOAD_DEMO_ON_STARTUP: bool = False
    
    class Config:
        env_file = ".env"
        env_prefix = "MAJHI_"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
