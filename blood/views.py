# blood/views.py
from functools import wraps

from django.contrib import messages
from django.shortcuts import render, redirect

from .exceptions import BloodBankError
from .forms import (
    DeleteForm, DonationForm, DonorForm, DonorUpdateForm,
    RecipientForm, RecipientUpdateForm, RequestForm, RequestUpdateForm,
)
from .models import BloodRequest
from .services import default_bank


# ------------------------ helpers ------------------------
def post_action(form_class, invalid_message):
    """
    Wrap a mutation view: POST only, bound form, business errors flashed.
    The view receives the cleaned data and the BloodBank to act on.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request):
            if request.method != "POST":
                return redirect("home")
            form = form_class(request.POST)
            if not form.is_valid():
                messages.error(request, invalid_message)
                return redirect("home")
            try:
                view_func(request, default_bank(), form.cleaned_data)
            except BloodBankError as exc:
                messages.error(request, exc.message)
            return redirect("home")
        return _wrapped
    return decorator


# ------------------------ page ------------------------
def home(request):
    snapshot = default_bank().snapshot()
    context = {
        "donors": snapshot.donors,
        "recipients": snapshot.recipients,
        "donations": snapshot.donations,
        "inventory": snapshot.inventory,
        "requests": snapshot.requests,
        "statuses": BloodRequest.Status.choices,
        "donor_form": DonorForm(),
        "recipient_form": RecipientForm(),
    }
    return render(request, "blood/index.html", context)


# ------------------------ donors ------------------------
@post_action(DonorForm, "Donor name and blood type are required.")
def donor_create(request, bank, data):
    bank.create_donor(data["name"], data["blood_type"], data["phone"], data["city"])
    messages.success(request, "Donor added.")


@post_action(DonorUpdateForm, "Donor update requires id, name, and blood type.")
def donor_update(request, bank, data):
    bank.update_donor(data["id"], data["name"], data["blood_type"], data["phone"], data["city"])


@post_action(DeleteForm, "Donor not found.")
def donor_delete(request, bank, data):
    bank.delete_donor(data["id"])


# ------------------------ recipients ------------------------
@post_action(RecipientForm, "Recipient name and blood type are required.")
def recipient_create(request, bank, data):
    bank.create_recipient(data["name"], data["blood_type"], data["phone"], data["hospital"])
    messages.success(request, "Recipient added.")


@post_action(RecipientUpdateForm, "Recipient update requires id, name, and blood type.")
def recipient_update(request, bank, data):
    bank.update_recipient(data["id"], data["name"], data["blood_type"], data["phone"], data["hospital"])


@post_action(DeleteForm, "Recipient not found.")
def recipient_delete(request, bank, data):
    bank.delete_recipient(data["id"])


# ------------------------ donations ------------------------
@post_action(DonationForm, "Donation requires donor, units, and expiry date.")
def donation_create(request, bank, data):
    bank.donations.record(data["donor_id"], data["units"], data["expiry_date"])
    messages.success(request, "Donation saved.")


@post_action(DeleteForm, "Donation not found.")
def donation_delete(request, bank, data):
    bank.donations.retire(data["id"])
    messages.success(request, "Donation removed from stock.")


# ------------------------ requests ------------------------
@post_action(RequestForm, "Request requires recipient and units.")
def request_create(request, bank, data):
    bank.requests.create(data["recipient_id"], data["units"])
    messages.success(request, "Request submitted.")


@post_action(RequestUpdateForm, "Request update requires id, units, and status.")
def request_update(request, bank, data):
    bank.requests.amend(data["id"], data["units"], data["status"])


@post_action(DeleteForm, "Request not found.")
def request_delete(request, bank, data):
    bank.requests.cancel(data["id"])


@post_action(DeleteForm, "Request not found.")
def request_fulfill(request, bank, data):
    bank.requests.fulfill(data["id"])
    messages.success(request, "Request fulfilled.")
