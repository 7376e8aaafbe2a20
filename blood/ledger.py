# blood/ledger.py
import logging

from django.db import DEFAULT_DB_ALIAS, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from .exceptions import InvalidArgument, NotFound
from .models import BloodType, Inventory

logger = logging.getLogger(__name__)


def check_units(units):
    if isinstance(units, bool) or not isinstance(units, int) or units <= 0:
        raise InvalidArgument("Units must be a positive whole number.")


class InventoryLedger:
    """
    One running balance per blood type.

    Both mutations are single conditional UPDATE statements, so the
    read of the balance and the write happen in one step at the storage
    layer and concurrent debits cannot overdraw a row.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def _rows(self):
        return Inventory.objects.using(self.using)

    def credit(self, ref: int, units: int) -> None:
        check_units(units)
        if not BloodType.objects.using(self.using).filter(pk=ref).exists():
            raise NotFound(f"Unknown blood type id {ref}.")

        with transaction.atomic(using=self.using):
            if not self._add(ref, units):
                try:
                    with transaction.atomic(using=self.using):
                        self._rows().create(blood_type_id=ref, units=units)
                except IntegrityError:
                    # row created by a concurrent credit
                    self._add(ref, units)
        logger.debug("credited %s unit(s) to blood type %s", units, ref)

    def _add(self, ref, units):
        return self._rows().filter(blood_type_id=ref).update(
            units=F("units") + units, deleted_at=None,
        )

    def debit(self, ref: int, units: int) -> bool:
        check_units(units)
        changed = (
            self._rows()
            .active()
            .filter(blood_type_id=ref, units__gte=units)
            .update(units=F("units") - units)
        )
        return changed == 1

    def balance(self, ref: int) -> int:
        units = self._rows().active().filter(blood_type_id=ref).values_list("units", flat=True).first()
        return units or 0

    def retire(self, ref: int) -> bool:
        """Logically remove an emptied balance row; it is reused by the next credit."""
        return bool(
            self._rows().active().filter(blood_type_id=ref, units=0).update(deleted_at=timezone.now())
        )

    def balances(self):
        return self._rows().active().select_related("blood_type").order_by("blood_type__label")
