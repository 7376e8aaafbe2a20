# blood/lifecycle.py
import datetime
import logging

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from .exceptions import (
    DonationConsumed, ImmutableFulfilledRequest, InsufficientInventory,
    InvalidArgument, NotFound, storage_guard,
)
from .ledger import check_units
from .models import BloodRequest, Donation, Donor, Recipient

logger = logging.getLogger(__name__)

Status = BloodRequest.Status

# Pending is the only state with outgoing transitions.
TRANSITIONS = {
    Status.PENDING: {Status.PENDING, Status.FULFILLED, Status.CANCELLED},
    Status.FULFILLED: set(),
    Status.CANCELLED: set(),
}


def can_transition(from_status, to_status) -> bool:
    return to_status in TRANSITIONS.get(from_status, set())


def parse_expiry(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    message = "Expiry date must be a valid YYYY-MM-DD date."
    if not isinstance(value, str):
        raise InvalidArgument(message)
    try:
        parsed = parse_date(value.strip())
    except ValueError as exc:
        raise InvalidArgument(message) from exc
    if parsed is None:
        raise InvalidArgument(message)
    return parsed


class _Lifecycle:
    def __init__(self, registry, ledger):
        if registry.using != ledger.using:
            raise ValueError("registry and ledger must share one database")
        self.registry = registry
        self.ledger = ledger
        self.using = ledger.using

    def _known_type(self, ref, who):
        if not ref or self.registry.is_unknown(ref):
            raise InvalidArgument(f"{who} has no known blood type.")
        return ref


# ------------------------ donations ------------------------
class DonationLifecycle(_Lifecycle):
    """Donations credit the donor's blood type; retiring one reverses the credit."""

    @storage_guard
    def record(self, donor_id: int, units: int, expiry) -> int:
        check_units(units)
        expiry_date = parse_expiry(expiry)

        with transaction.atomic(using=self.using):
            donor = Donor.objects.using(self.using).active().filter(pk=donor_id).first()
            if donor is None:
                raise NotFound("Donation requires a valid donor with blood type.")
            ref = self._known_type(donor.blood_type_id, "Donor")
            donation = Donation.objects.using(self.using).create(
                donor=donor, units=units, expiry_date=expiry_date,
            )
            self.ledger.credit(ref, units)

        logger.info("donation %s recorded: %s unit(s) from donor %s", donation.pk, units, donor.pk)
        return donation.pk

    @storage_guard
    def retire(self, donation_id: int) -> None:
        with transaction.atomic(using=self.using):
            donation = (
                Donation.objects.using(self.using)
                .select_for_update()
                .select_related("donor")
                .active()
                .filter(pk=donation_id)
                .first()
            )
            if donation is None:
                raise NotFound("Donation not found.")

            ref = donation.donor.blood_type_id
            if self.registry.is_unknown(ref):
                # never credited here; drain whatever legacy stock carries the label
                if not self.ledger.debit(ref, donation.units):
                    logger.warning("donation %s retired without a matching UNKNOWN balance", donation.pk)
            elif not self.ledger.debit(ref, donation.units):
                logger.warning("donation %s not retired: units already consumed", donation.pk)
                raise DonationConsumed()

            Donation.objects.using(self.using).filter(pk=donation.pk).soft_delete()

            still_donated = (
                Donation.objects.using(self.using).active()
                .filter(donor__blood_type_id=ref).exists()
            )
            if not still_donated:
                self.ledger.retire(ref)

        logger.info("donation %s retired, %s unit(s) removed from stock", donation.pk, donation.units)


# ------------------------ requests ------------------------
class RequestLifecycle(_Lifecycle):
    """
    Pending -> Fulfilled debits the ledger exactly once.
    Pending -> Cancelled never touches it. Both targets are terminal.
    """

    def _load(self, request_id):
        req = (
            BloodRequest.objects.using(self.using)
            .select_for_update()
            .select_related("recipient")
            .active()
            .filter(pk=request_id)
            .first()
        )
        if req is None:
            raise NotFound("Request not found.")
        return req

    @storage_guard
    def create(self, recipient_id: int, units: int) -> int:
        check_units(units)
        recipient = Recipient.objects.using(self.using).active().filter(pk=recipient_id).first()
        if recipient is None:
            raise NotFound("Request requires a valid recipient with blood type.")
        self._known_type(recipient.blood_type_id, "Recipient")

        req = BloodRequest.objects.using(self.using).create(
            recipient=recipient, units=units, status=Status.PENDING,
        )
        logger.info("request %s created: %s unit(s) for recipient %s", req.pk, units, recipient.pk)
        return req.pk

    @storage_guard
    def fulfill(self, request_id: int) -> None:
        with transaction.atomic(using=self.using):
            req = self._load(request_id)
            if req.status != Status.PENDING:
                raise ImmutableFulfilledRequest("Request already fulfilled.")
            self._fulfill(req, req.units)

    def _fulfill(self, req, units):
        ref = self._known_type(req.recipient.blood_type_id, "Recipient")
        if not self.ledger.debit(ref, units):
            logger.warning("request %s not fulfilled: %s unit(s) exceed stock", req.pk, units)
            raise InsufficientInventory()
        # guard on Pending so a concurrent fulfil rolls this debit back
        claimed = (
            BloodRequest.objects.using(self.using)
            .active()
            .filter(pk=req.pk, status=Status.PENDING)
            .update(status=Status.FULFILLED, units=units)
        )
        if not claimed:
            raise ImmutableFulfilledRequest("Request already fulfilled.")
        logger.info("request %s fulfilled with %s unit(s)", req.pk, units)

    @storage_guard
    def amend(self, request_id: int, units: int, status) -> None:
        check_units(units)
        if status not in Status.values:
            raise InvalidArgument(f"Unknown request status {status!r}.")

        with transaction.atomic(using=self.using):
            req = self._load(request_id)
            if req.status == Status.FULFILLED:
                if status == Status.FULFILLED and units == req.units:
                    return
                raise ImmutableFulfilledRequest()
            if not can_transition(req.status, status):
                raise ImmutableFulfilledRequest()

            if status == Status.FULFILLED:
                self._fulfill(req, units)
                return

            BloodRequest.objects.using(self.using).filter(pk=req.pk).update(units=units)
            if status == Status.CANCELLED:
                self._cancel(req)

    @storage_guard
    def cancel(self, request_id: int) -> None:
        with transaction.atomic(using=self.using):
            req = self._load(request_id)
            if req.status == Status.FULFILLED:
                raise ImmutableFulfilledRequest("Cannot delete a fulfilled request.")
            self._cancel(req)

    def _cancel(self, req):
        BloodRequest.objects.using(self.using).filter(pk=req.pk).update(
            status=Status.CANCELLED, deleted_at=timezone.now(),
        )
        logger.info("request %s cancelled", req.pk)
