# blood/models.py
from django.db import models
from django.utils import timezone

# -------------------- Constants --------------------
BLOOD_TYPES = [
    ("A+", "A+"), ("A-", "A-"),
    ("B+", "B+"), ("B-", "B-"),
    ("AB+", "AB+"), ("AB-", "AB-"),
    ("O+", "O+"), ("O-", "O-"),
]

LABEL_MAX_LENGTH = 16


# -------------------- Soft delete --------------------
class SoftDeleteQuerySet(models.QuerySet):
    def active(self):
        return self.filter(deleted_at__isnull=True)

    def soft_delete(self):
        return self.active().update(deleted_at=timezone.now())


# -------------------- Lookup --------------------
class BloodType(models.Model):
    label = models.CharField("Blood type", max_length=LABEL_MAX_LENGTH, unique=True, db_column="type")

    class Meta:
        db_table = "blood_types"
        ordering = ["label"]

    def __str__(self):
        return self.label


# -------------------- Core domain --------------------
class Donor(models.Model):
    name = models.CharField("Name", max_length=120)
    blood_type = models.ForeignKey(BloodType, on_delete=models.PROTECT, related_name="donors")
    phone = models.CharField("Phone", max_length=32, blank=True)
    city = models.CharField("City", max_length=80, blank=True)
    created_at = models.DateField("Created at", default=timezone.localdate)
    deleted_at = models.DateTimeField("Deleted at", null=True, blank=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        db_table = "donors"
        ordering = ["-id"]

    def __str__(self):
        return f"{self.name} ({self.blood_type})"


class Recipient(models.Model):
    name = models.CharField("Name", max_length=120)
    blood_type = models.ForeignKey(BloodType, on_delete=models.PROTECT, related_name="recipients")
    phone = models.CharField("Phone", max_length=32, blank=True)
    hospital = models.CharField("Hospital", max_length=120, blank=True)
    created_at = models.DateField("Created at", default=timezone.localdate)
    deleted_at = models.DateTimeField("Deleted at", null=True, blank=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        db_table = "recipients"
        ordering = ["-id"]

    def __str__(self):
        return f"{self.name} @ {self.hospital or '-'}"


class Donation(models.Model):
    donor = models.ForeignKey(Donor, on_delete=models.PROTECT, related_name="donations")
    units = models.PositiveIntegerField("Units")
    donation_date = models.DateField("Donation date", default=timezone.localdate)
    expiry_date = models.DateField("Expiry date")
    deleted_at = models.DateTimeField("Deleted at", null=True, blank=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        db_table = "donations"
        ordering = ["-id"]

    def __str__(self):
        return f"{self.units}u from donor #{self.donor_id} ({self.donation_date:%Y-%m-%d})"


class BloodRequest(models.Model):
    class Status(models.TextChoices):
        PENDING = "Pending", "Pending"
        FULFILLED = "Fulfilled", "Fulfilled"
        CANCELLED = "Cancelled", "Cancelled"

    recipient = models.ForeignKey(Recipient, on_delete=models.PROTECT, related_name="requests")
    units = models.PositiveIntegerField("Units")
    status = models.CharField("Status", max_length=10, choices=Status.choices,
                              default=Status.PENDING, db_index=True)
    request_date = models.DateField("Request date", default=timezone.localdate)
    deleted_at = models.DateTimeField("Deleted at", null=True, blank=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        db_table = "requests"
        ordering = ["-id"]

    def __str__(self):
        return f"Req #{self.pk} x{self.units} ({self.status})"


class Inventory(models.Model):
    blood_type = models.OneToOneField(BloodType, on_delete=models.PROTECT, related_name="inventory")
    units = models.PositiveIntegerField("Units", default=0)
    deleted_at = models.DateTimeField("Deleted at", null=True, blank=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        db_table = "inventory"
        ordering = ["blood_type__label"]
        verbose_name_plural = "inventory"

    def __str__(self):
        return f"{self.blood_type}: {self.units}"
