import os

from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# ------------------ Database ------------------
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", 5433)
DB_NAME = os.getenv("DB_NAME")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# ------------------ QR tokens ------------------
TOKEN_SECRET = os.getenv("TOKEN_SECRET", "change-me")
TOKEN_MAX_AGE_DAYS = int(os.getenv("TOKEN_MAX_AGE_DAYS", 30))
EVENT_GRACE_HOURS = int(os.getenv("EVENT_GRACE_HOURS", 24))
SHORT_CODE_ATTEMPTS = int(os.getenv("SHORT_CODE_ATTEMPTS", 10))

# ------------------ Tickets ------------------
DEFAULT_MAX_TRANSFERS = int(os.getenv("DEFAULT_MAX_TRANSFERS", 5))
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "NGN")

# ------------------ Payment gateway ------------------
PAYSTACK_SECRET_KEY = os.getenv("PAYSTACK_SECRET_KEY", "")
PAYSTACK_BASE_URL = os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co")
PAYSTACK_TIMEOUT = int(os.getenv("PAYSTACK_TIMEOUT", 15))
APP_DOMAIN = os.getenv("APP_DOMAIN", "http://localhost:3000")

# ------------------ Logging ------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "")
