"""Application configuration"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Database Configuration
    DATABASE_USER = os.getenv("DATABASE_USER", "postgres")
    DATABASE_PASSWORD = os.getenv("DATABASE_PASSWORD", "123456")
    DATABASE_HOST = os.getenv("DATABASE_HOST", "localhost")
    DATABASE_PORT = os.getenv("DATABASE_PORT", "5432")
    DATABASE_NAME = os.getenv("DATABASE_NAME", "stylesnap")
    DATABASE_URL_OVERRIDE = os.getenv("DATABASE_URL")

    @property
    def DATABASE_URL(self) -> str:
        """Full database URL; DATABASE_URL wins over the individual parts"""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE", "stylesnap/logs/logs.txt")

    # Public files (uploads + generated images are served from here)
    PUBLIC_DIR = os.getenv("PUBLIC_DIR", "public")
    UPLOAD_SUBDIR = "uploads"
    GENERATED_SUBDIR = "generated"
    UPLOAD_TTL_SECONDS = int(os.getenv("UPLOAD_TTL_SECONDS", 30 * 60))
    MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", 10))

    # Trial identity cookie
    TRIAL_COOKIE_NAME = "trialId"
    TRIAL_COOKIE_MAX_AGE = 60 * 60 * 24 * 365  # 1 year
    COOKIE_SECURE = os.getenv("COOKIE_SECURE", "true").lower() == "true"

    # Global cap on free generations per UTC day (0 = no cap)
    DAILY_FREE_LIMIT = int(os.getenv("DAILY_FREE_LIMIT", 0))

    # Razorpay Payment Gateway
    RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID", "").strip()
    RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "").strip()
    RAZORPAY_API_URL = os.getenv("RAZORPAY_API_URL", "https://api.razorpay.com/v1")
    PAYMENT_AMOUNT = int(os.getenv("PAYMENT_AMOUNT", 900))  # paise (₹9)
    PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "INR")
    CREDITS_PER_PAYMENT = int(os.getenv("CREDITS_PER_PAYMENT", 1))

    # Replicate image-to-image model
    REPLICATE_API_TOKEN = os.getenv("REPLICATE_API_TOKEN", "").strip()
    REPLICATE_API_URL = os.getenv("REPLICATE_API_URL", "https://api.replicate.com/v1")
    REPLICATE_IMAGE_MODEL = os.getenv("REPLICATE_IMAGE_MODEL", "black-forest-labs/flux-kontext-pro")
    REPLICATE_MULTI_IMAGE_MODEL = os.getenv("REPLICATE_MULTI_IMAGE_MODEL", "flux-kontext-apps/multi-image-kontext-pro")
    REPLICATE_POLL_INTERVAL_SECONDS = float(os.getenv("REPLICATE_POLL_INTERVAL_SECONDS", 1.5))

    # Outbound HTTP timeouts (seconds)
    HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", 60))
    GENERATION_TIMEOUT_SECONDS = float(os.getenv("GENERATION_TIMEOUT_SECONDS", 120))

    # Comma-separated browser origins allowed to call the API with the trial cookie
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:8000").split(",")
        if origin.strip()
    ]

    # Development/Production Settings
    ENVIRONMENT = os.getenv("ENVIRONMENT", "production")
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    # Project Metadata
    PROJECT_NAME = "StyleSnap API"
    PROJECT_VERSION = "1.0.0"
    API_V1_STR = "/api/v1"


settings = Settings()
