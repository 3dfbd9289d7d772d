"""
OFR – Django Settings (Infrastructure Only)
============================================
Django serves as the persistence and transaction container for the
operator filter registry. Registry semantics live in
engines.operator_filter — Django does not dictate them.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("OFR_SECRET_KEY", "ofr-dev-key-replace-before-deployment")

DEBUG = os.environ.get("OFR_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── OFR Modules ───────────────────────────────────────
    "core.filter_store",
    "core.bootstrap",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("OFR_DB_PATH", BASE_DIR / "db.sqlite3"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Operator Filter Registry ─────────────────────────────────
# Read by engines.operator_filter.config.load_registry_config().
OPERATOR_FILTER = {
    "guard_reentrant_calls": False,
    "logger_name": "ofr.registry",
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "ofr": {
            "handlers": ["console"],
            "level": os.environ.get("OFR_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
