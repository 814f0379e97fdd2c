"""
Django settings for the Keel backend.

- Loads secrets from environment variables
- Database via DATABASE_URL (postgres in production, sqlite locally)
- Outbound service endpoints and image pipeline knobs are env-driven
"""

import os
from pathlib import Path

import dj_database_url
from dotenv import load_dotenv

# Load .env file if present (for local dev)
load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# =============================================================================
# SECURITY SETTINGS (env-driven)
# =============================================================================

SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY",
    "dev-insecure-key-do-not-use-in-production",
)

DEBUG = os.environ.get("DJANGO_DEBUG", "False").lower() in ("true", "1", "yes")

ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")


# =============================================================================
# APPLICATION DEFINITION
# =============================================================================

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    # Third-party
    "corsheaders",
    # Keel apps
    "keel.core",
    "keel.game",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "keel.urls"

WSGI_APPLICATION = "keel.wsgi.application"


# =============================================================================
# DATABASE (via DATABASE_URL)
# =============================================================================

# Default to sqlite for initial setup, but real usage requires postgres
DATABASE_URL = os.environ.get(
    "DATABASE_URL",
    f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
)

DATABASES = {
    "default": dj_database_url.parse(
        DATABASE_URL,
        conn_max_age=600,
        conn_health_checks=True,
    )
}


# =============================================================================
# INTERNATIONALIZATION
# =============================================================================

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True


# =============================================================================
# DEFAULT PRIMARY KEY FIELD TYPE
# =============================================================================

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# =============================================================================
# CORS SETTINGS
# =============================================================================

# The game client reads /api/game/ from another origin.
CORS_ALLOWED_ORIGINS = os.environ.get(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173",
).split(",")

CORS_ALLOW_METHODS = ["GET", "OPTIONS"]


# =============================================================================
# OUTBOUND SERVICES
# =============================================================================

WIKIDATA_SPARQL_ENDPOINT = os.environ.get(
    "WIKIDATA_SPARQL_ENDPOINT",
    "https://query.wikidata.org/sparql",
)

WIKIPEDIA_SUMMARY_BASE_URL = os.environ.get(
    "WIKIPEDIA_SUMMARY_BASE_URL",
    "https://en.wikipedia.org/api/rest_v1/page/summary",
)

# Wikimedia services reject requests without an identifying agent.
KEEL_USER_AGENT = os.environ.get(
    "KEEL_USER_AGENT",
    "Mozilla/5.0 (compatible; KeelGame/1.0; +https://github.com/keel-game)",
)

KEEL_HTTP_TIMEOUT_S = os.environ.get("KEEL_HTTP_TIMEOUT_S", "30")


# =============================================================================
# IMAGE PIPELINE
# =============================================================================

# local = rembg model, remote = HTTP background-removal API, none = skip
KEEL_SEGMENTATION_BACKEND = os.environ.get("KEEL_SEGMENTATION_BACKEND", "local")
KEEL_SEGMENTATION_API_URL = os.environ.get(
    "KEEL_SEGMENTATION_API_URL",
    "https://api.remove.bg/v1.0/removebg",
)
KEEL_SEGMENTATION_API_KEY = os.environ.get("KEEL_SEGMENTATION_API_KEY", "")

KEEL_LINEART_MAX_WIDTH = os.environ.get("KEEL_LINEART_MAX_WIDTH", "800")


# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "keel": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
