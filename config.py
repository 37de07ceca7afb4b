import os
from dotenv import load_dotenv

load_dotenv(os.getenv("ENV_PATH", ".env"))

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "videotube")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", 8000))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

DEFAULT_PAGE = int(os.getenv("DEFAULT_PAGE", 1))
DEFAULT_LIMIT = int(os.getenv("DEFAULT_LIMIT", 10))
STATS_WINDOW_DAYS = int(os.getenv("STATS_WINDOW_DAYS", 30))
TOGGLE_MAX_ATTEMPTS = int(os.getenv("TOGGLE_MAX_ATTEMPTS", 5))
