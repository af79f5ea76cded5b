# app/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal

class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str
    ALGORITHM: Literal["HS256", "HS512"] = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12

    # Database
    DATABASE_URL: str

    # Email (Resend)
    RESEND_API_KEY: str | None = None
    RESEND_FROM_EMAIL: str = "no-reply@example.com"

    # Password reset
    PASSWORD_RESET_EXPIRE_MINUTES: int = 30

    # Frontend
    FRONTEND_RESET_URL: str = "http://localhost:5173/reset-password"
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    RATE_LIMIT_ENABLED: bool = True

    # Company branding printed on reports
    COMPANY_NAME: str = "Company Name, Inc."
    COMPANY_SHORT_NAME: str = "COMPANY"
    COMPANY_CONTACT_LINE: str = (
        "Company Name, Inc. | 123 Business St, City, State 12345 | (555) 123-4567"
    )

    # Sales report
    REPORT_MAX_DETAILED_TRANSACTIONS: int = 50
    REPORT_PAGE_BREAK_Y: float = 250
    REPORT_PAGE_TOP_Y: float = 20
    REPORT_PRICE_MODE: Literal["as_of_sale_date", "latest"] = "as_of_sale_date"
    REPORT_DATE_FORMAT: str = "%m/%d/%Y"
    REPORT_FILENAME_DATE_SUFFIX: bool = True



    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",  
    )


settings = Settings()
