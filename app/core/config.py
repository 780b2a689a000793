from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Booking Form Backend"

    # Server
    PORT: int = 3000
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = ["*"]
    MAX_BODY_BYTES: int = 1024 * 1024

    # Business
    BRAND_NAME: str = "Pressure Washing"
    BUSINESS_TIMEZONE: str = "America/Los_Angeles"

    # Storage (Supabase wins when both values are set)
    DATABASE_PATH: str = "data.sqlite"
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # Email
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASS: str = ""
    FROM_EMAIL: str = ""
    TO_EMAIL: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/errors.log"

    @property
    def sender_email(self) -> str:
        return self.FROM_EMAIL or self.SMTP_USER

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
