import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./iam.db")
    DB_POOL_TIMEOUT_SECONDS = data.get("DB_POOL_TIMEOUT_SECONDS", 5)
    DB_CONNECT_ARGS = data.get("DB_CONNECT_ARGS", {"timeout": 5})
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    REDIS_TIMEOUT_SECONDS = float(data.get("REDIS_TIMEOUT_SECONDS", 0.5))
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    CACHE_BACKEND = data.get("CACHE_BACKEND", "redis")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Tokens
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ACCESS_TOKEN_MINUTES = int(data.get("JWT_ACCESS_TOKEN_MINUTES", 15))
    LOGIN_TICKET_TTL_MINUTES = int(data.get("LOGIN_TICKET_TTL_MINUTES", 5))
    REFRESH_TOKEN_TTL_DAYS = int(data.get("REFRESH_TOKEN_TTL_DAYS", 30))
    REFRESH_TOKEN_ROTATION = bool(data.get("REFRESH_TOKEN_ROTATION", False))
    PASSWORD_RESET_TTL_HOURS = int(data.get("PASSWORD_RESET_TTL_HOURS", 2))
    PASSWORD_RESET_URL = data.get(
        "PASSWORD_RESET_URL", "http://localhost:3000/reset-password?token={token}"
    )
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    # Rate limiting
    RATE_LIMIT_ENABLED = bool(data.get("RATE_LIMIT_ENABLED", True))
    RATE_LIMIT_WHITELIST = data.get("RATE_LIMIT_WHITELIST", [])
    RATE_LIMIT_TRUSTED_PROXIES = data.get("RATE_LIMIT_TRUSTED_PROXIES", [])
    RATE_LIMIT_DEFAULT_CAPACITY = int(data.get("RATE_LIMIT_DEFAULT_CAPACITY", 1000))
    RATE_LIMIT_DEFAULT_REFILL = int(data.get("RATE_LIMIT_DEFAULT_REFILL", 1000))
    RATE_LIMIT_WHITELIST_CAPACITY = int(data.get("RATE_LIMIT_WHITELIST_CAPACITY", 1500))
    RATE_LIMIT_WHITELIST_REFILL = int(data.get("RATE_LIMIT_WHITELIST_REFILL", 1500))
    RATE_LIMIT_PERIOD_SECONDS = int(data.get("RATE_LIMIT_PERIOD_SECONDS", 60))
    RATE_LIMIT_WHITELIST_ROUTE_FACTOR = float(data.get("RATE_LIMIT_WHITELIST_ROUTE_FACTOR", 10))
    RATE_LIMIT_STORE_TIMEOUT_SECONDS = float(data.get("RATE_LIMIT_STORE_TIMEOUT_SECONDS", 0.5))

    # Email
    SMTP_HOST = data.get("SMTP_HOST", "")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USERNAME = data.get("SMTP_USERNAME", "")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD", "")
    SMTP_FROM = data.get("SMTP_FROM", "no-reply@iam.local")
