import datetime

import pytest

from blood.services import BloodBank


@pytest.fixture
def bank(db):
    return BloodBank()


@pytest.fixture
def expiry():
    return datetime.date.today() + datetime.timedelta(days=42)


@pytest.fixture
def make_donor(bank):
    def _make(blood_type="O+", name="Dana Levi", **kwargs):
        return bank.create_donor(name, blood_type, **kwargs)
    return _make


@pytest.fixture
def make_recipient(bank):
    def _make(blood_type="O+", name="Ward 4", **kwargs):
        return bank.create_recipient(name, blood_type, **kwargs)
    return _make


@pytest.fixture
def stocked(bank, make_donor, expiry):
    """Record a donation and return the blood type id it credited."""
    def _stock(blood_type="O+", units=2):
        donor_id = make_donor(blood_type)
        bank.donations.record(donor_id, units, expiry)
        return bank.registry.resolve(blood_type)
    return _stock
