from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str
    jwt_secret_key: str = "your-secret-key-change-in-production"  # Default for development

    # Stored shift times are always in this zone; callers see their own zone.
    server_timezone: str = "Europe/London"
    default_user_timezone: str = "Europe/London"
    default_currency: str = "GBP"

    # Comma-separated, e.g. "http://localhost:3000,https://portal.example.com"
    cors_origins: str = ""
    log_level: str = "INFO"

    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_from: str | None = None
    smtp_use_tls: bool = True

    push_enabled: bool = False

    class Config:
        env_file = ".env"

settings = Settings()
