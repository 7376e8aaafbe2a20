# blood/context_processors.py
from .models import BLOOD_TYPES
from .registry import UNKNOWN_LABEL
from .services import default_bank


def blood_type_labels(request):
    labels = {bt for bt, _ in BLOOD_TYPES}
    labels.update(default_bank().registry.labels())
    labels.discard(UNKNOWN_LABEL)
    return {"blood_type_labels": sorted(labels)}
