from django.db import transaction
from django.utils import timezone

from clinic.models import Employee


def next_employee_code():
    """``EMP-<nnnnn>``, one past the highest code issued so far."""
    last = (
        Employee.objects.filter(employee_code__startswith='EMP-')
        .order_by('-employee_code')
        .values_list('employee_code', flat=True)
        .first()
    )
    n = 0
    if last:
        try:
            n = int(last.split('-', 1)[1])
        except ValueError:
            n = Employee.objects.count()
    return f'EMP-{n + 1:05d}'


@transaction.atomic
def create_employee(**fields):
    if not fields.get('employee_code'):
        fields['employee_code'] = next_employee_code()
    return Employee.objects.create(**fields)


def soft_delete(obj, *, status_field=None, status_value=None):
    """Stamp ``deleted_at`` (and optionally a status) instead of deleting the row."""
    obj.deleted_at = timezone.now()
    fields = ['deleted_at']
    if status_field:
        setattr(obj, status_field, status_value)
        fields.append(status_field)
    if hasattr(obj, 'updated_at'):
        fields.append('updated_at')
    obj.save(update_fields=fields)
    return obj
