class LegacyDatabaseRouter:
    """Keeps Django migrations off the ``legacy`` alias."""

    legacy_alias = "legacy"

    def allow_migrate(self, db, app_label, model_name=None, **hints):
        if db == self.legacy_alias:
            return False
        return None
