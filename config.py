import logging
import os


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Config:
    """Environment overrides layered on top of `settings.py`.

    Only variables that are actually set override the file defaults; see
    `Config.from_env()`.
    """

    @staticmethod
    def from_env() -> dict[str, object]:
        overrides: dict[str, object] = {}

        if os.getenv("SECRET_KEY"):
            overrides["SECRET_KEY"] = os.environ["SECRET_KEY"]
        if os.getenv("LOG_LEVEL"):
            overrides["LOG_LEVEL"] = os.environ["LOG_LEVEL"].strip().upper()

        # Auth
        if os.getenv("JWT_SECRET"):
            overrides["JWT_SECRET"] = os.environ["JWT_SECRET"].strip()
        if os.getenv("JWT_ALG"):
            overrides["JWT_ALG"] = os.environ["JWT_ALG"].strip()
        if os.getenv("ACCESS_TOKEN_EXPIRE_MIN"):
            overrides["ACCESS_TOKEN_EXPIRE_MIN"] = _env_int("ACCESS_TOKEN_EXPIRE_MIN", 60)

        # Listing bounds
        if os.getenv("DEFAULT_PAGE_SIZE"):
            overrides["DEFAULT_PAGE_SIZE"] = _env_int("DEFAULT_PAGE_SIZE", 10)
        if os.getenv("MAX_PAGE_SIZE"):
            overrides["MAX_PAGE_SIZE"] = _env_int("MAX_PAGE_SIZE", 100)

        # Request logging / startup
        overrides["SLOW_REQUEST_MS"] = _env_int("SLOW_REQUEST_MS", 250)
        overrides["INIT_DB_ON_STARTUP"] = _env_bool("INIT_DB_ON_STARTUP", False)
        return overrides


def configure_logging(app_logger: logging.Logger, level_name: str) -> None:
    """Configure the Flask app logger in a simple, predictable way."""

    level = getattr(logging, level_name, logging.INFO)

    # Avoid duplicate handlers (e.g., in tests or reload scenarios)
    if app_logger.handlers:
        app_logger.setLevel(level)
        return

    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    handler.setFormatter(formatter)

    app_logger.addHandler(handler)
    app_logger.setLevel(level)
