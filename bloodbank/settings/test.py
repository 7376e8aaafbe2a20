from .base import *

SECRET_KEY = "test-secret"
DEBUG = False
ALLOWED_HOSTS = ["testserver"]

# "legacy" is never migrated; tests build pre-normalization tables in it by hand
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    },
    "legacy": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    },
}
DATABASE_ROUTERS = ["bloodbank.routers.LegacyDatabaseRouter"]

LOW_STOCK_THRESHOLD = 3

LOGGING["loggers"]["blood"]["level"] = "WARNING"
