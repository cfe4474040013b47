"""
Which roles may view or edit each category of patient data.

Stored :class:`~clinic.models.PatientDataAccessRule` rows override the
built-in defaults category by category.
"""
from __future__ import annotations

from typing import Optional

from django.db import transaction

from clinic.exceptions import BadRequest
from clinic.models import PatientDataAccessRule
from clinic.roles import is_role

PATIENT_DATA_CATEGORIES = ('demographics', 'clinical_notes', 'lab_results', 'prescriptions', 'billing')
OPERATIONS = ('view', 'edit')

DEFAULT_PATIENT_DATA_ACCESS: dict[str, dict[str, list[str]]] = {
    'demographics': {'view': ['admin', 'doctor', 'nurse', 'receptionist'], 'edit': ['admin', 'receptionist', 'nurse']},
    'clinical_notes': {'view': ['admin', 'doctor', 'nurse'], 'edit': ['admin', 'doctor']},
    'lab_results': {'view': ['admin', 'doctor', 'lab_tech', 'nurse'], 'edit': ['admin', 'lab_tech']},
    'prescriptions': {'view': ['admin', 'doctor', 'pharmacist', 'nurse'], 'edit': ['admin', 'doctor', 'pharmacist']},
    'billing': {'view': ['admin', 'accountant', 'receptionist'], 'edit': ['admin', 'accountant']},
}


def get_access_config() -> dict[str, dict[str, list[str]]]:
    config = {cat: {op: list(roles) for op, roles in entry.items()} for cat, entry in DEFAULT_PATIENT_DATA_ACCESS.items()}
    for rule in PatientDataAccessRule.objects.filter(category__in=PATIENT_DATA_CATEGORIES):
        config[rule.category] = {'view': list(rule.view_roles or []), 'edit': list(rule.edit_roles or [])}
    return config


def _validate_roles(category: str, op: str, roles) -> list[str]:
    if not isinstance(roles, list):
        raise BadRequest(f'{category}.{op} must be a list of roles')
    unknown = [r for r in roles if not is_role(r)]
    if unknown:
        raise BadRequest(f'Unknown role(s) in {category}.{op}: {", ".join(map(str, unknown))}')
    # keep order, drop duplicates
    return list(dict.fromkeys(roles))


@transaction.atomic
def set_access_config(config: dict, *, user=None) -> dict[str, dict[str, list[str]]]:
    if not isinstance(config, dict):
        raise BadRequest('Expected an object keyed by category')
    unknown = [c for c in config if c not in PATIENT_DATA_CATEGORIES]
    if unknown:
        raise BadRequest(f'Unknown categor(ies): {", ".join(unknown)}')
    current = get_access_config()
    for category, entry in config.items():
        if not isinstance(entry, dict):
            raise BadRequest(f'{category} must be an object with view and edit lists')
        view = _validate_roles(category, 'view', entry.get('view', current[category]['view']))
        edit = _validate_roles(category, 'edit', entry.get('edit', current[category]['edit']))
        PatientDataAccessRule.objects.update_or_create(
            category=category,
            defaults={'view_roles': view, 'edit_roles': edit, 'updated_by': user if getattr(user, 'pk', None) else None},
        )
    return get_access_config()


def can_access_patient_data(role: Optional[str], category: str, op: str = 'view') -> bool:
    if not role or category not in PATIENT_DATA_CATEGORIES or op not in OPERATIONS:
        return False
    return role in get_access_config()[category][op]
