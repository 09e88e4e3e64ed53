"""
Application settings
- Database, Redis, auth, payment gateway, push/email delivery and ID generation settings.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///shipday.db"

    # Redis (falls back to in-memory queues when unreachable)
    REDIS_URL: str = "redis://localhost:6379"

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:5000",
        "https://swiftship.vercel.app",
    ]

    # Auth
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120

    # Human-readable identifiers
    SHIPMENT_ID_PREFIX: str = "SHP"
    ORDER_ID_PREFIX: str = "ORD"
    DRIVER_ID_PREFIX: str = "DRV"
    ID_RETRY_ATTEMPTS: int = 3

    # Estimated delivery (days from creation)
    EXPRESS_ETA_DAYS: int = 2
    ECONOMY_ETA_DAYS: int = 4
    LEGACY_ETA_DAYS: int = 3

    # Flat driver payout per completed delivery
    DRIVER_RATE_PER_DELIVERY: float = 50.0

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    STRIPE_PUBLISHABLE_KEY: str = ""
    STRIPE_CURRENCY: str = "zar"
    STRIPE_API_VERSION: str = "2022-11-15"

    # PayFast (sandbox merchant by default)
    PAYFAST_MODE: str = "sandbox"
    PAYFAST_MERCHANT_ID: str = "10044381"
    PAYFAST_MERCHANT_KEY: str = "rdpy6ewl5duej"
    PAYFAST_PASSPHRASE: str | None = None
    FRONTEND_URL: str = "http://localhost:5173"
    API_URL: str = "http://localhost:8000"

    # Push delivery (FCM HTTP v1 compatible endpoint; empty disables push)
    PUSH_ENDPOINT: str = ""
    PUSH_AUTH_TOKEN: str = ""
    PUSH_TIMEOUT_SECONDS: float = 10.0

    # Email delivery (Resend-compatible HTTP API; empty key disables email)
    MAIL_API_URL: str = "https://api.resend.com"
    MAIL_API_KEY: str = ""
    MAIL_FROM: str = "ShipDay <no-reply@shipday.app>"
    MAIL_TIMEOUT_SECONDS: float = 10.0

    # Email verification codes and unconfirmed driver sign-ups
    VERIFICATION_CODE_TTL_MINUTES: int = 15
    PENDING_DRIVER_TTL_MINUTES: int = 60

    # Documents
    WAYBILL_LOGO_PATH: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
