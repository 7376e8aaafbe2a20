# blood/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path("", views.home, name="home"),

    # people
    path("donors/", views.donor_create, name="donor_create"),
    path("donors/update/", views.donor_update, name="donor_update"),
    path("donors/delete/", views.donor_delete, name="donor_delete"),
    path("recipients/", views.recipient_create, name="recipient_create"),
    path("recipients/update/", views.recipient_update, name="recipient_update"),
    path("recipients/delete/", views.recipient_delete, name="recipient_delete"),

    # stock
    path("donations/", views.donation_create, name="donation_create"),
    path("donations/delete/", views.donation_delete, name="donation_delete"),

    # requests
    path("requests/", views.request_create, name="request_create"),
    path("requests/update/", views.request_update, name="request_update"),
    path("requests/delete/", views.request_delete, name="request_delete"),
    path("fulfill/", views.request_fulfill, name="request_fulfill"),
]
