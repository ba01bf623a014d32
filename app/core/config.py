from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Booking Intake API"
    API_PREFIX: str = "/api"

    # Server
    PORT: int = 5000
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/errors.log"

    # Security
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:5173",       # local dev
        "https://tomscompliance.com",  # production
    ]
    RATE_LIMIT: str = "50 per 15 minutes"
    MAX_BODY_BYTES: int = 10 * 1024

    # Mail (Gmail App Password in EMAIL_PASS)
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_TIMEOUT: float = 30.0
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""
    MAIL_FROM_NAME: str = "TOMS Compliance"
    ADMIN_EMAIL: str = ""

    # Google Sheets
    GOOGLE_CLIENT_EMAIL: str = ""
    GOOGLE_PRIVATE_KEY: str = ""
    GOOGLE_CREDENTIALS_JSON: str = ""
    GOOGLE_SHEET_ID: str = ""
    SHEET_RANGE: str = "Sheet1!A:F"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
