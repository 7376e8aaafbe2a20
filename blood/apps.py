from django.apps import AppConfig


class BloodConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "blood"
    verbose_name = "Blood bank"
