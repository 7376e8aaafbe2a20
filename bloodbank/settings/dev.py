from .base import *

DEBUG = True
ALLOWED_HOSTS = ["*"]

# Verbose logging in dev
LOGGING["loggers"]["blood"]["level"] = ENV("BLOODBANK_LOG_LEVEL", "DEBUG")
