import os


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return int(v.strip())
    except ValueError:
        return default


def _env_str(*names: str, default: str = "") -> str:
    """Return the first non-blank value among `names`, else `default`."""

    for name in names:
        v = os.getenv(name)
        if v is not None and v.strip():
            return v.strip()
    return default


class Config:
    """Base configuration loaded from environment variables."""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-not-secret")

    # Feature flags
    ENABLE_WATCHLIST: bool = _env_bool("ENABLE_WATCHLIST", True)

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
