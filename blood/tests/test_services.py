import pytest

from blood.exceptions import Conflict, ImmutableFulfilledRequest, InvalidArgument, NotFound
from blood.models import BloodType, Donation, Donor, Recipient

pytestmark = pytest.mark.django_db


def test_create_donor_normalizes_blood_type(bank):
    donor_id = bank.create_donor("  Noa ", " ab+ ", phone=" 050-1234567 ", city="Haifa")

    donor = Donor.objects.select_related("blood_type").get(pk=donor_id)
    assert donor.name == "Noa"
    assert donor.blood_type.label == "AB+"
    assert donor.phone == "050-1234567"
    assert donor.created_at is not None


@pytest.mark.parametrize("name, blood_type", [("", "O+"), ("Noa", ""), ("  ", "A-")])
def test_create_requires_name_and_type(bank, name, blood_type):
    with pytest.raises(InvalidArgument):
        bank.create_donor(name, blood_type)
    with pytest.raises(InvalidArgument):
        bank.create_recipient(name, blood_type)
    assert not Donor.objects.exists()
    assert not Recipient.objects.exists()


def test_update_donor(bank, make_donor):
    donor_id = make_donor("A+")
    bank.update_donor(donor_id, "Renamed", "a-", phone="1", city="Eilat")

    donor = Donor.objects.get(pk=donor_id)
    assert (donor.name, donor.blood_type.label, donor.city) == ("Renamed", "A-", "Eilat")


def test_update_donor_type_locked_by_active_donations(bank, make_donor, expiry):
    donor_id = make_donor("A+")
    donation = bank.donations.record(donor_id, 1, expiry)

    with pytest.raises(Conflict):
        bank.update_donor(donor_id, "Dana", "B+")
    bank.update_donor(donor_id, "Dana Cohen", "A+")

    bank.donations.retire(donation)
    bank.update_donor(donor_id, "Dana Cohen", "B+")
    assert Donor.objects.get(pk=donor_id).blood_type.label == "B+"


def test_update_recipient_type_locked_by_fulfilled_requests(bank, stocked, make_recipient):
    stocked("O+", 1)
    recipient = make_recipient("O+")
    bank.requests.fulfill(bank.requests.create(recipient, 1))

    with pytest.raises(ImmutableFulfilledRequest):
        bank.update_recipient(recipient, "Ward 4", "O-")
    bank.update_recipient(recipient, "Ward 5", "O+", hospital="Rambam")
    assert Recipient.objects.get(pk=recipient).hospital == "Rambam"


def test_soft_delete(bank, make_donor, make_recipient):
    donor_id = make_donor()
    recipient_id = make_recipient()

    bank.delete_donor(donor_id)
    bank.delete_recipient(recipient_id)

    assert Donor.objects.get(pk=donor_id).deleted_at is not None
    assert Recipient.objects.get(pk=recipient_id).deleted_at is not None
    with pytest.raises(NotFound):
        bank.delete_donor(donor_id)
    with pytest.raises(NotFound):
        bank.update_recipient(recipient_id, "x", "O+")
    with pytest.raises(NotFound):
        bank.delete_recipient(424242)


def test_snapshot_lists_active_rows(bank, make_donor, make_recipient, expiry):
    gone = make_donor("B-", name="Gone")
    kept = make_donor("AB+", name="Kept")
    bank.delete_donor(gone)
    bank.donations.record(kept, 2, expiry)
    bank.donations.record(make_donor("A+", name="Other"), 1, expiry)
    recipient = make_recipient("A+")
    cancelled = bank.requests.create(recipient, 1)
    open_request = bank.requests.create(recipient, 2)
    bank.requests.cancel(cancelled)

    snap = bank.snapshot()

    assert [d.name for d in snap.donors] == ["Other", "Kept"]
    assert [r.pk for r in snap.recipients] == [recipient]
    assert len(snap.donations) == 2
    assert [(row.blood_type.label, row.units) for row in snap.inventory] == [("A+", 1), ("AB+", 2)]
    assert [r.pk for r in snap.requests] == [open_request]
    assert BloodType.objects.filter(label="B-").exists()


def test_unknown_donor_retyped_after_retiring_donations(bank, make_donor, expiry):
    donor_id = make_donor("UNKNOWN")
    donation = Donation.objects.create(donor_id=donor_id, units=2, expiry_date=expiry)

    with pytest.raises(Conflict):
        bank.update_donor(donor_id, "Dana", "O-")
    bank.donations.retire(donation.pk)
    bank.update_donor(donor_id, "Dana", "O-")

    bank.donations.record(donor_id, 1, expiry)
    assert bank.ledger.balance(bank.registry.resolve("O-")) == 1
