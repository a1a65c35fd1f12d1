from typing import List, Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Environment
    DEV_MODE: bool = True  # Set to False in production
    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Persistence
    DATASTORE: str = "sql"  # sql | firestore
    DATABASE_URL: str = "sqlite+aiosqlite:///./settlement_sam.db"
    DATABASE_ECHO: bool = False
    FIRESTORE_PROJECT_ID: Optional[str] = None

    # JWT Settings
    SECRET_KEY: str = "dev-secret-change-in-production"
    ALGORITHM: str = "HS256"
    ADMIN_TOKEN_EXPIRE_HOURS: int = 24
    LEAD_SESSION_EXPIRE_HOURS: int = 24
    PHONE_TOKEN_EXPIRE_MINUTES: int = 5

    # Admin credentials (fallback when no admin row exists)
    ADMIN_USERNAME: str = ""
    ADMIN_PASSWORD_HASH: str = ""

    # Admin brute-force protection
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_LOCKOUT_MINUTES: int = 15

    # SMS verification
    OTP_CODE_LENGTH: int = 6  # 4-6 digits
    OTP_TTL_MINUTES: int = 10
    OTP_RATE_WINDOW_MINUTES: int = 60
    OTP_MAX_SENDS_PER_WINDOW: int = 3
    OTP_MAX_ATTEMPTS: int = 5

    # Email Settings (Gmail SMTP carries both lead emails and email-to-SMS)
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "noreply@settlementsam.com"
    EMAIL_FROM_NAME: str = "Settlement Sam"

    # Google Sheets delivery (service account)
    GOOGLE_SERVICE_ACCOUNT_EMAIL: str = ""
    GOOGLE_SERVICE_ACCOUNT_KEY: str = ""  # PEM, literal \n allowed

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""

    # Delivery
    EXCLUSIVITY_DAYS: int = 90

    class Config:
        env_file = ".env"

settings = Settings()
