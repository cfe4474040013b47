"""
Staff roles known to the system.

A role is the user category half of the permission matrix key; the
other half is the module (see :mod:`clinic.module_permissions`).
"""
from __future__ import annotations

ROLES = (
    'admin',
    'facility_admin',
    'doctor',
    'nurse',
    'receptionist',
    'accountant',
    'pharmacist',
    'lab_tech',
)

_DISPLAY_NAMES = {
    'admin': 'Admin',
    'facility_admin': 'Facility Admin',
    'doctor': 'Doctor',
    'nurse': 'Nurse',
    'receptionist': 'Receptionist',
    'accountant': 'Accountant',
    'pharmacist': 'Pharmacist',
    'lab_tech': 'Lab Tech',
}

ROLE_CHOICES = [(r, _DISPLAY_NAMES[r]) for r in ROLES]


def is_role(value) -> bool:
    return isinstance(value, str) and value in ROLES


def role_display_name(role: str) -> str:
    """Return the human readable name of ``role`` (the id itself if unknown)."""
    return _DISPLAY_NAMES.get(role, role)
