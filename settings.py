"""App settings.

Flask loads this module on startup via ``app.config.from_pyfile(...)``.
Environment variables (see `config.Config.from_env`) override these values.
"""

# Single source of truth for app configuration defaults.
SETTINGS: dict[str, object] = {
    # Flask
    "SECRET_KEY": "dev-not-secret",
    # Logging
    "LOG_LEVEL": "INFO",
    # Auth. In production, set JWT_SECRET in environment.
    "JWT_SECRET": "dev-change-this-secret",
    "JWT_ALG": "HS256",
    "ACCESS_TOKEN_EXPIRE_MIN": 60,
    # Listing endpoints
    "DEFAULT_PAGE_SIZE": 10,
    "MAX_PAGE_SIZE": 100,
}

SECRET_KEY = SETTINGS["SECRET_KEY"]
LOG_LEVEL = SETTINGS["LOG_LEVEL"]
JWT_SECRET = SETTINGS["JWT_SECRET"]
JWT_ALG = SETTINGS["JWT_ALG"]
ACCESS_TOKEN_EXPIRE_MIN = SETTINGS["ACCESS_TOKEN_EXPIRE_MIN"]
DEFAULT_PAGE_SIZE = SETTINGS["DEFAULT_PAGE_SIZE"]
MAX_PAGE_SIZE = SETTINGS["MAX_PAGE_SIZE"]
