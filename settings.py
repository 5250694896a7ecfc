"""App settings.

Flask loads this module on startup via ``app.config.from_pyfile(...)``.

Values come from environment variables where set, otherwise the defaults below.
"""

from config import Config, _env_bool, _env_int, _env_str

# Single source of truth for app configuration.
SETTINGS: dict[str, object] = {
    # Flask
    "SECRET_KEY": Config.SECRET_KEY,
    # Feature flags
    "ENABLE_WATCHLIST": Config.ENABLE_WATCHLIST,
    # Logging
    "LOG_LEVEL": Config.LOG_LEVEL,
    "SLOW_REQUEST_MS": _env_int("SLOW_REQUEST_MS", 250),
    # SEC EDGAR
    # SEC requires a descriptive User-Agent that includes contact info.
    # Example: "InsiderFilings your.name@domain.com"
    "SEC_USER_AGENT": _env_str("SEC_USER_AGENT", "USER_AGENT"),
    "SEC_TIMEOUT_SECONDS": _env_int("SEC_TIMEOUT_SECONDS", 30),
    # Ticker -> CIK directory is refreshed at most once per window.
    "TICKER_CACHE_TTL_SECONDS": _env_int("TICKER_CACHE_TTL_SECONDS", 24 * 60 * 60),
    "RECENT_FILINGS_LIMIT": _env_int("RECENT_FILINGS_LIMIT", 25),
    # Database (watchlist + health check)
    "DATABASE_URL": _env_str("DATABASE_URL"),
    "INIT_DB_ON_STARTUP": _env_bool("INIT_DB_ON_STARTUP", False),
}

# Optional convenience exports (mirrors earlier style).
SECRET_KEY = SETTINGS["SECRET_KEY"]
ENABLE_WATCHLIST = SETTINGS["ENABLE_WATCHLIST"]
LOG_LEVEL = SETTINGS["LOG_LEVEL"]
SLOW_REQUEST_MS = SETTINGS["SLOW_REQUEST_MS"]
SEC_USER_AGENT = SETTINGS["SEC_USER_AGENT"]
SEC_TIMEOUT_SECONDS = SETTINGS["SEC_TIMEOUT_SECONDS"]
TICKER_CACHE_TTL_SECONDS = SETTINGS["TICKER_CACHE_TTL_SECONDS"]
RECENT_FILINGS_LIMIT = SETTINGS["RECENT_FILINGS_LIMIT"]
DATABASE_URL = SETTINGS["DATABASE_URL"]
INIT_DB_ON_STARTUP = SETTINGS["INIT_DB_ON_STARTUP"]
