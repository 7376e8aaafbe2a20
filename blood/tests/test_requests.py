import pytest

from blood.exceptions import (
    ImmutableFulfilledRequest, InsufficientInventory, InvalidArgument, NotFound,
)
from blood.lifecycle import RequestLifecycle, can_transition
from blood.models import BloodRequest

pytestmark = pytest.mark.django_db

Status = BloodRequest.Status


@pytest.fixture
def pending(bank, make_recipient):
    def _pending(blood_type="O+", units=1):
        return bank.requests.create(make_recipient(blood_type), units)
    return _pending


def test_transition_table():
    assert can_transition(Status.PENDING, Status.FULFILLED)
    assert can_transition(Status.PENDING, Status.CANCELLED)
    assert not can_transition(Status.FULFILLED, Status.PENDING)
    assert not can_transition(Status.CANCELLED, Status.PENDING)
    assert not can_transition(Status.FULFILLED, Status.CANCELLED)


def test_create_starts_pending(bank, pending):
    req = BloodRequest.objects.get(pk=pending(units=3))
    assert req.status == Status.PENDING
    assert req.units == 3


def test_create_validation(bank, make_recipient):
    recipient = make_recipient()
    with pytest.raises(InvalidArgument):
        bank.requests.create(recipient, 0)
    with pytest.raises(NotFound):
        bank.requests.create(9999, 1)
    bank.delete_recipient(recipient)
    with pytest.raises(NotFound):
        bank.requests.create(recipient, 1)


def test_fulfill_over_stock_leaves_everything(bank, stocked, pending):
    ref = stocked("A+", 2)
    req_id = pending("A+", 5)

    with pytest.raises(InsufficientInventory):
        bank.requests.fulfill(req_id)

    assert BloodRequest.objects.get(pk=req_id).status == Status.PENDING
    assert bank.ledger.balance(ref) == 2


def test_fulfill_uses_recipient_blood_type(bank, stocked, pending):
    stocked("A+", 5)
    req_id = pending("B+", 1)

    with pytest.raises(InsufficientInventory):
        bank.requests.fulfill(req_id)


def test_fulfill_only_once(bank, stocked, pending):
    ref = stocked("O+", 4)
    req_id = pending("O+", 1)
    bank.requests.fulfill(req_id)

    with pytest.raises(ImmutableFulfilledRequest):
        bank.requests.fulfill(req_id)
    assert bank.ledger.balance(ref) == 3


def test_amend_fulfilled_accepts_only_noop(bank, stocked, pending):
    ref = stocked("O+", 4)
    req_id = pending("O+", 2)
    bank.requests.fulfill(req_id)

    bank.requests.amend(req_id, 2, "Fulfilled")
    with pytest.raises(ImmutableFulfilledRequest):
        bank.requests.amend(req_id, 3, "Fulfilled")
    with pytest.raises(ImmutableFulfilledRequest):
        bank.requests.amend(req_id, 2, "Pending")
    with pytest.raises(ImmutableFulfilledRequest):
        bank.requests.amend(req_id, 2, "Cancelled")

    req = BloodRequest.objects.get(pk=req_id)
    assert (req.units, req.status) == (2, Status.FULFILLED)
    assert bank.ledger.balance(ref) == 2


def test_amend_pending_to_fulfilled_debits_new_units(bank, stocked, pending):
    ref = stocked("O+", 4)
    req_id = pending("O+", 1)

    bank.requests.amend(req_id, 3, "Fulfilled")

    req = BloodRequest.objects.get(pk=req_id)
    assert (req.units, req.status) == (3, Status.FULFILLED)
    assert bank.ledger.balance(ref) == 1


def test_amend_pending_to_fulfilled_over_stock(bank, stocked, pending):
    ref = stocked("O+", 2)
    req_id = pending("O+", 1)

    with pytest.raises(InsufficientInventory):
        bank.requests.amend(req_id, 3, "Fulfilled")

    req = BloodRequest.objects.get(pk=req_id)
    assert (req.units, req.status) == (1, Status.PENDING)
    assert bank.ledger.balance(ref) == 2


def test_amend_pending_units_skips_ledger(bank, stocked, pending):
    ref = stocked("O+", 2)
    req_id = pending("O+", 1)

    bank.requests.amend(req_id, 7, "Pending")

    assert BloodRequest.objects.get(pk=req_id).units == 7
    assert bank.ledger.balance(ref) == 2


def test_amend_to_cancelled(bank, pending):
    req_id = pending(units=1)
    bank.requests.amend(req_id, 4, "Cancelled")

    req = BloodRequest.objects.get(pk=req_id)
    assert (req.units, req.status) == (4, Status.CANCELLED)
    assert req.deleted_at is not None


@pytest.mark.parametrize("units, status", [(0, "Pending"), (1, "Approved"), (1, "")])
def test_amend_validation(bank, pending, units, status):
    with pytest.raises(InvalidArgument):
        bank.requests.amend(pending(), units, status)


def test_cancel_pending(bank, stocked, pending):
    ref = stocked("O+", 2)
    req_id = pending("O+", 1)

    bank.requests.cancel(req_id)

    req = BloodRequest.objects.get(pk=req_id)
    assert req.status == Status.CANCELLED
    assert req.deleted_at is not None
    assert bank.ledger.balance(ref) == 2
    with pytest.raises(NotFound):
        bank.requests.fulfill(req_id)
    with pytest.raises(NotFound):
        bank.requests.cancel(req_id)


def test_cancel_fulfilled_is_rejected(bank, stocked, pending):
    stocked("O+", 2)
    req_id = pending("O+", 1)
    bank.requests.fulfill(req_id)

    with pytest.raises(ImmutableFulfilledRequest):
        bank.requests.cancel(req_id)
    assert BloodRequest.objects.get(pk=req_id).status == Status.FULFILLED


def test_fulfill_lost_race_returns_the_units(bank, stocked, pending, monkeypatch):
    ref = stocked("O+", 3)
    request_id = pending("O+", 2)
    load = RequestLifecycle._load

    def load_then_fulfilled_elsewhere(self, pk):
        req = load(self, pk)
        BloodRequest.objects.filter(pk=pk).update(status=Status.FULFILLED)
        return req

    monkeypatch.setattr(RequestLifecycle, "_load", load_then_fulfilled_elsewhere)

    with pytest.raises(ImmutableFulfilledRequest):
        bank.requests.fulfill(request_id)
    assert bank.ledger.balance(ref) == 3
