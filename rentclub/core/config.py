from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Set
import os


class Settings(BaseSettings):
    APP_NAME: str = "RentClub"
    DEBUG: bool = True
    DB_ECHO: bool = False

    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "data/rentclub.db")

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_PATH == ":memory:":
            return "sqlite://"
        # Always resolve path relative to project root, not current working directory
        db_path = self.DATABASE_PATH
        if not os.path.isabs(db_path):
            root_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
            db_path = os.path.join(root_dir, db_path)
        return f"sqlite:///{os.path.abspath(db_path)}"

    # Identity tokens issued by the auth provider (sub = external subject id)
    SECRET_KEY: str = os.getenv("SECRET_KEY", "rentclub-dev-secret-change-me")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day

    # Comma separated auth subject ids treated as administrators
    ADMIN_USER_IDS: str = os.getenv("ADMIN_USER_IDS", "")

    @property
    def ADMIN_USER_ID_SET(self) -> Set[str]:
        return {value.strip() for value in self.ADMIN_USER_IDS.split(",") if value.strip()}

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    MAX_UPLOAD_SIZE: int = 1 * 1024 * 1024  # 1MB

    @property
    def UPLOAD_DIR_ABS(self) -> str:
        """Get absolute path for upload directory."""
        upload_dir = self.UPLOAD_DIR
        if os.path.isabs(upload_dir):
            return upload_dir
        root_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
        return os.path.join(root_dir, upload_dir)

    # Where auth failures and finished payments send the browser
    SAFE_REDIRECT_PATH: str = "/"
    MEMBER_DASHBOARD_PATH: str = "/member/dashboard"
    BOOKINGS_PATH: str = "/bookings"

    # Hosted checkout (Stripe-compatible REST API)
    STRIPE_SECRET_KEY: str = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_API_BASE: str = "https://api.stripe.com/v1"
    PAYMENT_CURRENCY: str = "idr"
    PAYMENT_AMOUNT_MULTIPLIER: int = 100  # minor units per major unit
    PAYMENT_TIMEOUT_SECONDS: int = 10
    SITE_URL: str = os.getenv("SITE_URL", "http://localhost:3000")

    # Membership program
    DEFAULT_TIER_NAME: str = "Tier 1"
    MEMBER_CODE_LENGTH: int = 6
    MEMBER_CODE_MAX_ATTEMPTS: int = 10
    CLOSER_COMMISSION_PERCENT: int = 3
    MEMBERSHIP_PRICE_VARIABLE: str = "exclusiveMemberPrice"
    DEFAULT_MEMBERSHIP_PRICE: int = 15000000
    MEMBERSHIP_TAX_PERCENT: int = 0
    MAX_DOWNLINE_DEPTH: int = 10

    # Bookings
    BOOKING_REFERRAL_DISCOUNT_PERCENT: int = 0

    STATS_CACHE_TTL: int = 120

    HOST: str = "127.0.0.1"
    PORT: int = 8765

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # Ignore extra environment variables
    )


settings = Settings()
