# blood/forms.py
from django import forms
from django.core.validators import RegexValidator

from .models import BloodRequest, LABEL_MAX_LENGTH
from .registry import normalize_label

# ---------------- Validators ----------------
phone_validator = RegexValidator(regex=r"^[0-9+()\-\s]{3,32}$",
                                 message="Phone may contain digits, spaces, +, - and parentheses only.")


def _text(label, max_length, required=True, **attrs):
    return forms.CharField(label=label, max_length=max_length, required=required,
                           widget=forms.TextInput(attrs={"class": "form-control", **attrs}))


def _units():
    return forms.IntegerField(min_value=1, label="Units",
                              widget=forms.NumberInput(attrs={"class": "form-control", "min": "1"}))


def _id(label="ID"):
    return forms.IntegerField(min_value=1, label=label, widget=forms.HiddenInput)


# ==================== People ====================
class PersonForm(forms.Form):
    name = _text("Name", 120, placeholder="Full name")
    blood_type = _text("Blood type", LABEL_MAX_LENGTH, list="blood-types", placeholder="O+")
    phone = forms.CharField(label="Phone", max_length=32, required=False, validators=[phone_validator],
                            widget=forms.TextInput(attrs={"class": "form-control"}))

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError("Name is required.")
        return name

    def clean_blood_type(self):
        label = normalize_label(self.cleaned_data["blood_type"])
        if not label:
            raise forms.ValidationError("Blood type is required.")
        return label


class DonorForm(PersonForm):
    city = _text("City", 80, required=False)


class DonorUpdateForm(DonorForm):
    id = _id()


class RecipientForm(PersonForm):
    hospital = _text("Hospital", 120, required=False)


class RecipientUpdateForm(RecipientForm):
    id = _id()


class DeleteForm(forms.Form):
    id = _id()


# ==================== Donations & requests ====================
class DonationForm(forms.Form):
    donor_id = forms.IntegerField(min_value=1, label="Donor")
    units = _units()
    expiry_date = forms.DateField(label="Expiry date", input_formats=["%Y-%m-%d"],
                                  widget=forms.DateInput(attrs={"type": "date", "class": "form-control"}))


class RequestForm(forms.Form):
    recipient_id = forms.IntegerField(min_value=1, label="Recipient")
    units = _units()


class RequestUpdateForm(forms.Form):
    id = _id()
    units = _units()
    status = forms.ChoiceField(choices=BloodRequest.Status.choices, label="Status",
                               widget=forms.Select(attrs={"class": "form-select"}))
