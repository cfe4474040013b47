from django.db import transaction
from django.utils import timezone
from clinic.exceptions import Conflict
from clinic.models import Patient


def next_uhid(year=None):
    """Next free hospital number of the form ``OPD-<year>-<nnnn>``."""
    year = year or timezone.localdate().year
    prefix = f'OPD-{year}-'
    n = Patient.objects.filter(uhid__startswith=prefix).count() + 1
    while Patient.objects.filter(uhid=f'{prefix}{n:04d}').exists():
        n += 1
    return f'{prefix}{n:04d}'


def patient_payload(body):
    """Accept both ``{"patient": {...}}`` and a flat body."""
    if isinstance(body, dict) and isinstance(body.get('patient'), dict):
        return body['patient']
    return body if isinstance(body, dict) else {}


def _check_uhid(uhid, exclude=None):
    qs = Patient.objects.filter(uhid=uhid)
    if exclude is not None:
        qs = qs.exclude(pk=exclude.pk)
    if qs.exists():
        raise Conflict(f'Patient number {uhid} already exists')


@transaction.atomic
def create_patient(**fields):
    if fields.get('uhid'):
        _check_uhid(fields['uhid'])
    else:
        fields['uhid'] = next_uhid()
    return Patient.objects.create(**fields)


def update_patient(patient, **fields):
    if 'uhid' in fields:
        if not fields['uhid']:
            fields.pop('uhid')
        else:
            _check_uhid(fields['uhid'], exclude=patient)
    for attr, value in fields.items():
        setattr(patient, attr, value)
    patient.save()
    return patient


def deactivate_patient(patient):
    patient.is_active = False
    patient.save(update_fields=['is_active', 'updated_at'])
    return patient


def search_seed(rows, q):
    if not q:
        return rows
    q = q.lower()
    return [
        r for r in rows
        if q in (r.get('name') or '').lower()
        or q in (r.get('uhid') or r.get('id') or '').lower()
        or q in (r.get('phone') or '').lower()
    ]
