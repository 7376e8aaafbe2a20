# blood/registry.py
from django.db import DEFAULT_DB_ALIAS

from .exceptions import InvalidArgument, NotFound
from .models import BloodType, LABEL_MAX_LENGTH

UNKNOWN_LABEL = "UNKNOWN"


def normalize_label(value) -> str:
    return (value or "").strip().upper()


def is_valid_label(label: str) -> bool:
    return bool(label) and len(label) <= LABEL_MAX_LENGTH


class BloodTypeRegistry:
    """
    Maps canonical blood-type labels ("O+", "AB-") to stable ids.
    Labels are created lazily; the unique column makes concurrent
    creation of the same label collapse onto one row.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def _clean(self, label):
        label = normalize_label(label)
        if not label:
            raise InvalidArgument("Blood type is required.")
        if len(label) > LABEL_MAX_LENGTH:
            raise InvalidArgument(f"Blood type must be at most {LABEL_MAX_LENGTH} characters.")
        return label

    def resolve_or_create(self, label) -> int:
        # get_or_create retries the lookup when a concurrent insert wins
        bt, _ = BloodType.objects.using(self.using).get_or_create(label=self._clean(label))
        return bt.pk

    def resolve(self, label) -> int:
        label = normalize_label(label)
        ref = (
            BloodType.objects.using(self.using)
            .filter(label=label)
            .values_list("pk", flat=True)
            .first()
        )
        if ref is None:
            raise NotFound(f"Unknown blood type {label!r}.")
        return ref

    def is_unknown(self, ref: int) -> bool:
        return BloodType.objects.using(self.using).filter(pk=ref, label=UNKNOWN_LABEL).exists()

    def labels(self) -> list[str]:
        return list(BloodType.objects.using(self.using).order_by("label").values_list("label", flat=True))
