# Configuration from environment variables (.env or deployment Variables).

import os
from dotenv import load_dotenv

load_dotenv()


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_int(key: str, default: int) -> int:
    try:
        return int(_env(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    try:
        return float(_env(key, str(default)))
    except ValueError:
        return default


def _env_list(key: str, default: list = None) -> list:
    s = _env(key)
    if not s:
        return default or []
    result = [x.strip() for x in s.split(",") if x.strip()]
    return result if result else (default or [])


# ============================================================================
# Auth
# ============================================================================
JWT_SECRET = _env("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = _env("JWT_ALGORITHM", "HS256")
TOKEN_TTL_DAYS = _env_int("TOKEN_TTL_DAYS", 7)

MIN_PASSWORD_LENGTH = _env_int("MIN_PASSWORD_LENGTH", 6)
BCRYPT_ROUNDS = _env_int("BCRYPT_ROUNDS", 10)

# ============================================================================
# Admin
# ============================================================================
# Seeded on startup when both are set
ADMIN_EMAIL = _env("ADMIN_EMAIL").lower()
ADMIN_PASSWORD = _env("ADMIN_PASSWORD")

# Defaults for the AdminConfig singleton (created on first read)
DEFAULT_PAYPAL_EMAIL = _env("DEFAULT_PAYPAL_EMAIL", "payments@secretlease.com")
DEFAULT_BTC_ADDRESS = _env("DEFAULT_BTC_ADDRESS", "bc1qxy2kgdygjrsqtzq2n0yrf2493p83kkfjhx0wlh")
DEFAULT_USDT_ADDRESS = _env("DEFAULT_USDT_ADDRESS", "TJsH5K8xxxTRC20xxxADDRESSxxx7Y3z")
DEFAULT_PRICE_USD = _env_float("DEFAULT_PRICE_USD", 60.0)

PAYMENT_METHODS = ("paypal", "btc", "usdt")

# ============================================================================
# API
# ============================================================================
CORS_ORIGINS = _env_list("CORS_ORIGINS", ["*"])
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()

SEARCH_LIMIT = _env_int("SEARCH_LIMIT", 60)
SEED_DEMO_LISTINGS = _env_int("SEED_DEMO_LISTINGS", 0)

# Backend API URL (for scripts using services.api_client)
BACKEND_URL = _env("BACKEND_URL", "http://localhost:8000")
