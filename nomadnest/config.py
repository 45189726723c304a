from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional, List


class Settings(BaseSettings):
    # App settings
    debug: bool = Field(default=False)
    app_name: str = "NomadNest"
    cors_allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8080",
    ]

    # Database settings (APP_DATABASE_URL)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./nomadnest.db",
    )

    # JWT settings
    jwt_secret_key: str = Field(
        default="your-jwt-secret-key-change-in-production"
    )
    jwt_algorithm: str = Field(default="HS256")
    # 1 week = 7 * 24 * 60 = 10,080 minutes
    jwt_expiry_minutes: int = Field(default=10080)

    # Seeded admin account
    admin_email: str = Field(default="admin@example.com")
    admin_password: str = Field(default="password123")
    admin_name: str = Field(default="Admin User")
    # bcrypt cost factor
    password_hash_rounds: int = Field(default=12)

    # Auto-seeding of demo content into empty collections
    autoseed_enabled: bool = Field(default=True)

    # Free tier limits
    free_trip_limit: int = Field(default=1)
    free_trip_edit_limit: int = Field(default=3)

    # Subscription pricing
    monthly_plan_price: float = Field(default=9.99)
    annual_plan_price: float = Field(default=99.99)
    currency: str = Field(default="USD")

    # Moderation: number of warnings that blocks an account
    moderation_block_threshold: int = Field(default=3)

    # Theme
    theme_enforce_brand_colors: bool = Field(default=True)
    brand_color: str = Field(default="#065f46")

    # Travel partner / affiliate identifiers
    booking_partner_id: str = Field(default="booking-test-partner")
    skyscanner_api_key: str = Field(default="sk-test-api-key")
    tripadvisor_affiliate_id: str = Field(default="tripadvisor-test-affiliate")

    # Metrics
    metrics_token: Optional[str] = Field(default=None)

    # Logging
    log_sample_rate: float = Field(default=0.1)

    class Config:
        env_file = ".env"
        env_prefix = "APP_"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
