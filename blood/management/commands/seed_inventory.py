# blood/management/commands/seed_inventory.py
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import DEFAULT_DB_ALIAS
from django.utils import timezone

from blood.models import BLOOD_TYPES, Donor
from blood.services import BloodBank


class Command(BaseCommand):
    help = "Seed initial inventory: top up every blood type to N units (default 10)."

    def add_arguments(self, parser):
        parser.add_argument("--per-type", type=int, default=10,
                            help="Target units per blood type (default: 10)")
        parser.add_argument("--expiry-days", type=int,
                            default=getattr(settings, "SEED_EXPIRY_DAYS", 42),
                            help="Expiry offset in days for seeded donations (default: 42)")
        parser.add_argument("--database", default=DEFAULT_DB_ALIAS,
                            help="Database alias to seed (default: default)")

    def handle(self, *args, **opts):
        per_type = opts["per_type"]
        bank = BloodBank(using=opts["database"])
        expiry = timezone.localdate() + timedelta(days=opts["expiry_days"])

        created_total = 0
        for bt, _ in BLOOD_TYPES:
            ref = bank.registry.resolve_or_create(bt)
            current = bank.ledger.balance(ref)
            to_add = max(0, per_type - current)
            if to_add == 0:
                self.stdout.write(f"{bt}: already has {current}, skipping.")
                continue

            # Seed donor (technical), one per type
            seed_donor = (
                Donor.objects.using(bank.using).active()
                .filter(name=f"Seed Stock {bt}", blood_type_id=ref).first()
            )
            donor_id = seed_donor.pk if seed_donor else bank.create_donor(f"Seed Stock {bt}", bt)
            bank.donations.record(donor_id, to_add, expiry)
            created_total += to_add
            self.stdout.write(self.style.SUCCESS(f"{bt}: added {to_add} units (now target={per_type})."))

        self.stdout.write(self.style.SUCCESS(f"Done. Added {created_total} unit(s) total."))
