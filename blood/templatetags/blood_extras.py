from django import template
from django.conf import settings

register = template.Library()

STATUS_CLASSES = {
    "Pending": "bg-warning text-dark",
    "Fulfilled": "bg-success",
    "Cancelled": "bg-secondary",
}


@register.filter(name="status_class")
def status_class(status):
    return STATUS_CLASSES.get(status, "bg-light text-dark")


@register.filter(name="stock_class")
def stock_class(units):
    # red below the configured threshold
    threshold = getattr(settings, "LOW_STOCK_THRESHOLD", 5)
    try:
        units = int(units)
    except (TypeError, ValueError):
        return ""
    return "text-danger fw-bold" if units < threshold else ""
