# blood/management/commands/normalize_blood_types.py
from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import DEFAULT_DB_ALIAS, connections

from blood.legacy import normalize_legacy_schema


class Command(BaseCommand):
    help = (
        "Move legacy free-text blood types into the blood_types table, "
        "then let Django adopt the rebuilt tables (migrate --fake-initial)."
    )

    def add_arguments(self, parser):
        parser.add_argument("--database", default=DEFAULT_DB_ALIAS,
                            help="Database alias to normalize (default: default)")
        parser.add_argument("--skip-migrate", action="store_true",
                            help="Only rebuild the tables, do not run migrate afterwards")

    def handle(self, *args, **opts):
        alias = opts["database"]
        report = normalize_legacy_schema(connections[alias])
        if report is None:
            self.stdout.write("Blood types already normalized, nothing to do.")
        else:
            for table, rows in report.items():
                self.stdout.write(f"{table}: copied {rows} row(s).")
            self.stdout.write(self.style.SUCCESS("Legacy blood types normalized."))

        if not opts["skip_migrate"]:
            call_command("migrate", database=alias, fake_initial=True,
                         interactive=False, verbosity=opts["verbosity"])
