import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV = os.environ.get

# -----------------------
#  Security
# -----------------------
SECRET_KEY = ENV("DJANGO_SECRET_KEY", "change-me-in-prod")
DEBUG = ENV("DJANGO_DEBUG", "False").lower() == "true"
ALLOWED_HOSTS = [h for h in ENV("DJANGO_ALLOWED_HOSTS", "").split(",") if h] or []

# -----------------------
#  Applications
# -----------------------
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    "blood",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "bloodbank.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.messages.context_processors.messages",
                "blood.context_processors.blood_type_labels",
            ],
        },
    },
]

WSGI_APPLICATION = "bloodbank.wsgi.application"

# -----------------------
#  Database
# -----------------------
# One embedded SQLite file, shared by every component through its alias.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ENV("BLOODBANK_DB_PATH", str(BASE_DIR / "bloodbank.db")),
    }
}
BLOODBANK_DATABASE = "default"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Sessions only carry flash messages
MESSAGE_STORAGE = "django.contrib.messages.storage.session.SessionStorage"

# -----------------------
#  Internationalisation
# -----------------------
LANGUAGE_CODE = ENV("LANGUAGE_CODE", "en-us")
TIME_ZONE = ENV("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

# -----------------------
#  Static
# -----------------------
STATIC_URL = "/static/"
STATIC_ROOT = ENV("DJANGO_STATIC_ROOT", str(BASE_DIR / "staticfiles"))

# -----------------------
#  Blood bank
# -----------------------
LOW_STOCK_THRESHOLD = int(ENV("LOW_STOCK_THRESHOLD", "5"))
SEED_EXPIRY_DAYS = int(ENV("SEED_EXPIRY_DAYS", "42"))

# -----------------------
#  Logging
# -----------------------
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": ENV("DJANGO_LOG_LEVEL", "INFO")},
        "blood": {"handlers": ["console"], "level": ENV("BLOODBANK_LOG_LEVEL", "INFO"), "propagate": False},
    },
}
