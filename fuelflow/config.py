from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Supabase
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    # Application
    app_env: str = "local"
    log_level: str = "INFO"
    backend: Literal["supabase", "memory"] = "supabase"

    # Station
    station_name: str = "AMU Petrol Pump"
    display_timezone: str = "Asia/Kolkata"

    # Tokens
    token_validity_minutes: int = 60

    # UI settings
    default_amount: int = 500
    quick_amounts: List[int] = [200, 500, 1000, 2000]

    # QR rendering
    qr_width: int = 280
    qr_margin: int = 2
    qr_dark: str = "#000000"
    qr_light: str = "#ffffff"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
