# blood/services.py
import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, transaction

from .exceptions import Conflict, ImmutableFulfilledRequest, InvalidArgument, NotFound, storage_guard
from .ledger import InventoryLedger
from .lifecycle import DonationLifecycle, RequestLifecycle
from .models import BloodRequest, Donation, Donor, Recipient
from .registry import BloodTypeRegistry

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    donors: list
    recipients: list
    donations: list
    inventory: list
    requests: list


def _required(value, message):
    value = (value or "").strip()
    if not value:
        raise InvalidArgument(message)
    return value


def default_bank():
    """BloodBank bound to the alias named by the BLOODBANK_DATABASE setting."""
    return BloodBank(using=getattr(settings, "BLOODBANK_DATABASE", DEFAULT_DB_ALIAS))


class BloodBank:
    """
    Entry point used by views and commands. Every component is bound to
    the same database alias; nothing here reaches for a global connection.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using
        self.registry = BloodTypeRegistry(using)
        self.ledger = InventoryLedger(using)
        self.donations = DonationLifecycle(self.registry, self.ledger)
        self.requests = RequestLifecycle(self.registry, self.ledger)

    # ------------------------ donors ------------------------
    @storage_guard
    def create_donor(self, name, blood_type, phone="", city="") -> int:
        name = _required(name, "Donor name and blood type are required.")
        with transaction.atomic(using=self.using):
            ref = self.registry.resolve_or_create(blood_type)
            donor = Donor.objects.using(self.using).create(
                name=name, blood_type_id=ref, phone=(phone or "").strip(), city=(city or "").strip(),
            )
        logger.info("donor %s registered", donor.pk)
        return donor.pk

    @storage_guard
    def update_donor(self, donor_id, name, blood_type, phone="", city="") -> None:
        name = _required(name, "Donor update requires id, name, and blood type.")
        with transaction.atomic(using=self.using):
            donor = self._active(Donor, donor_id, "Donor not found.")
            ref = self.registry.resolve_or_create(blood_type)
            if ref != donor.blood_type_id and donor.donations.using(self.using).active().exists():
                raise Conflict("Cannot change the blood type of a donor with active donations.")
            Donor.objects.using(self.using).filter(pk=donor.pk).update(
                name=name, blood_type_id=ref, phone=(phone or "").strip(), city=(city or "").strip(),
            )

    @storage_guard
    def delete_donor(self, donor_id) -> None:
        if not Donor.objects.using(self.using).filter(pk=donor_id).soft_delete():
            raise NotFound("Donor not found.")
        logger.info("donor %s deleted", donor_id)

    # ------------------------ recipients ------------------------
    @storage_guard
    def create_recipient(self, name, blood_type, phone="", hospital="") -> int:
        name = _required(name, "Recipient name and blood type are required.")
        with transaction.atomic(using=self.using):
            ref = self.registry.resolve_or_create(blood_type)
            recipient = Recipient.objects.using(self.using).create(
                name=name, blood_type_id=ref, phone=(phone or "").strip(), hospital=(hospital or "").strip(),
            )
        logger.info("recipient %s registered", recipient.pk)
        return recipient.pk

    @storage_guard
    def update_recipient(self, recipient_id, name, blood_type, phone="", hospital="") -> None:
        name = _required(name, "Recipient update requires id, name, and blood type.")
        with transaction.atomic(using=self.using):
            recipient = self._active(Recipient, recipient_id, "Recipient not found.")
            ref = self.registry.resolve_or_create(blood_type)
            fulfilled = recipient.requests.using(self.using).filter(status=BloodRequest.Status.FULFILLED)
            if ref != recipient.blood_type_id and fulfilled.exists():
                raise ImmutableFulfilledRequest(
                    "Cannot change the blood type of a recipient with fulfilled requests."
                )
            Recipient.objects.using(self.using).filter(pk=recipient.pk).update(
                name=name, blood_type_id=ref, phone=(phone or "").strip(), hospital=(hospital or "").strip(),
            )

    @storage_guard
    def delete_recipient(self, recipient_id) -> None:
        if not Recipient.objects.using(self.using).filter(pk=recipient_id).soft_delete():
            raise NotFound("Recipient not found.")
        logger.info("recipient %s deleted", recipient_id)

    # ------------------------ listing ------------------------
    @storage_guard
    def snapshot(self) -> Snapshot:
        db = self.using
        return Snapshot(
            donors=list(Donor.objects.using(db).active().select_related("blood_type").order_by("-id")),
            recipients=list(Recipient.objects.using(db).active().select_related("blood_type").order_by("-id")),
            donations=list(
                Donation.objects.using(db).active()
                .select_related("donor", "donor__blood_type").order_by("-id")
            ),
            inventory=list(self.ledger.balances()),
            requests=list(
                BloodRequest.objects.using(db).active()
                .select_related("recipient", "recipient__blood_type").order_by("-id")
            ),
        )

    def _active(self, model, pk, message):
        obj = model.objects.using(self.using).active().select_for_update().filter(pk=pk).first()
        if obj is None:
            raise NotFound(message)
        return obj
