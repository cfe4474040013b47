"""
Static role/module permission matrix.

Every administrative area of the application is a *module*.  For each
module the table below lists which roles may create, read, update and
delete its records.  Admin appears in every list.  Report visibility is
a separate, smaller table keyed by report type.
"""
from __future__ import annotations

PERMISSIONS = ('create', 'read', 'update', 'delete')

MODULES = (
    'patient_clerking',
    'triage',
    'medical_clerking',
    'appointments',
    'lab_orders',
    'imaging',
    'pharmacy',
    'billing',
    'reports',
    'doctors',
    'staff',
    'patients',
    'departments',
    'recipe_management',
    'medicine_management',
    'user_management',
)

MODULE_PERMISSIONS: dict[str, dict[str, tuple[str, ...]]] = {
    'patient_clerking': {
        'create': ('receptionist', 'nurse', 'admin', 'facility_admin'),
        'read': ('receptionist', 'nurse', 'admin', 'doctor', 'facility_admin'),
        'update': ('receptionist', 'nurse', 'admin', 'facility_admin'),
        'delete': ('admin', 'facility_admin'),
    },
    'triage': {
        'create': ('nurse', 'receptionist', 'admin', 'facility_admin'),
        'read': ('nurse', 'receptionist', 'admin', 'doctor', 'facility_admin'),
        'update': ('nurse', 'receptionist', 'admin', 'facility_admin'),
        'delete': ('admin', 'facility_admin'),
    },
    'medical_clerking': {
        'create': ('doctor', 'admin'),
        'read': ('doctor', 'admin', 'nurse', 'receptionist', 'facility_admin'),
        'update': ('doctor', 'admin'),
        'delete': ('admin',),
    },
    'appointments': {
        'create': ('receptionist', 'nurse', 'admin', 'facility_admin'),
        'read': ('receptionist', 'nurse', 'accountant', 'admin', 'doctor', 'facility_admin'),
        'update': ('receptionist', 'nurse', 'accountant', 'admin', 'facility_admin'),
        'delete': ('admin', 'facility_admin'),
    },
    'lab_orders': {
        'create': ('doctor', 'lab_tech', 'admin'),
        'read': ('doctor', 'lab_tech', 'admin', 'nurse', 'receptionist', 'facility_admin'),
        'update': ('lab_tech', 'admin'),
        'delete': ('admin',),
    },
    'imaging': {
        'create': ('doctor', 'admin'),
        'read': ('doctor', 'lab_tech', 'admin', 'nurse', 'facility_admin'),
        'update': ('lab_tech', 'admin'),
        'delete': ('admin',),
    },
    'pharmacy': {
        'create': ('doctor', 'pharmacist', 'admin'),
        'read': ('pharmacist', 'admin', 'doctor', 'nurse', 'facility_admin'),
        'update': ('pharmacist', 'admin'),
        'delete': ('admin',),
    },
    'billing': {
        'create': ('accountant', 'admin', 'facility_admin'),
        'read': ('accountant', 'admin', 'receptionist', 'facility_admin'),
        'update': ('accountant', 'admin', 'facility_admin'),
        'delete': ('admin',),
    },
    'reports': {
        'create': ('admin', 'accountant', 'facility_admin'),
        'read': ('admin', 'accountant', 'receptionist', 'doctor', 'nurse', 'pharmacist', 'lab_tech', 'facility_admin'),
        'update': ('admin', 'facility_admin'),
        'delete': ('admin',),
    },
    'doctors': {
        'create': ('admin', 'facility_admin'),
        'read': ('admin', 'doctor', 'receptionist', 'nurse', 'facility_admin'),
        'update': ('admin', 'facility_admin'),
        'delete': ('admin',),
    },
    'staff': {
        'create': ('admin', 'facility_admin'),
        'read': ('admin', 'facility_admin'),
        'update': ('admin', 'facility_admin'),
        'delete': ('admin',),
    },
    'patients': {
        'create': ('receptionist', 'nurse', 'admin', 'doctor', 'facility_admin'),
        'read': ('admin', 'doctor', 'receptionist', 'nurse', 'facility_admin'),
        'update': ('receptionist', 'nurse', 'admin', 'doctor', 'facility_admin'),
        'delete': ('admin', 'facility_admin'),
    },
    'departments': {
        'create': ('admin', 'facility_admin'),
        'read': ('admin', 'doctor', 'receptionist', 'nurse', 'facility_admin'),
        'update': ('admin', 'facility_admin'),
        'delete': ('admin',),
    },
    'recipe_management': {
        'create': ('pharmacist', 'admin'),
        'read': ('pharmacist', 'admin', 'facility_admin'),
        'update': ('pharmacist', 'admin'),
        'delete': ('admin',),
    },
    'medicine_management': {
        'create': ('pharmacist', 'admin'),
        'read': ('pharmacist', 'admin', 'facility_admin'),
        'update': ('pharmacist', 'admin'),
        'delete': ('admin',),
    },
    'user_management': {
        'create': ('admin', 'facility_admin'),
        'read': ('admin', 'facility_admin'),
        'update': ('admin', 'facility_admin'),
        'delete': ('admin',),
    },
}

# HTTP verb -> matrix operation
METHOD_PERMISSIONS = {
    'GET': 'read',
    'HEAD': 'read',
    'OPTIONS': 'read',
    'POST': 'create',
    'PUT': 'update',
    'PATCH': 'update',
    'DELETE': 'delete',
}


def can(role: str | None, module_id: str, permission: str) -> bool:
    """Return True if ``role`` holds ``permission`` on ``module_id``.

    An empty role, an unknown module or an unknown permission never
    grants access.
    """
    if not role:
        return False
    perms = MODULE_PERMISSIONS.get(module_id)
    if not perms:
        return False
    return role in perms.get(permission, ())


def can_create(role: str | None, module_id: str) -> bool:
    return can(role, module_id, 'create')


def can_read(role: str | None, module_id: str) -> bool:
    return can(role, module_id, 'read')


def can_update(role: str | None, module_id: str) -> bool:
    return can(role, module_id, 'update')


def can_delete(role: str | None, module_id: str) -> bool:
    return can(role, module_id, 'delete')


def permissions_for_role(role: str | None) -> dict[str, dict[str, bool]]:
    """Flatten the matrix into ``{module: {permission: bool}}`` for one role."""
    return {m: {p: can(role, m, p) for p in PERMISSIONS} for m in MODULES}


def permission_for_method(method: str) -> str | None:
    return METHOD_PERMISSIONS.get((method or '').upper())


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
REPORT_TYPES = ('transactions', 'appointments_summary', 'clerking_summary', 'billing_summary')

REPORT_TYPE_ACCESS: dict[str, tuple[str, ...]] = {
    'transactions': ('admin', 'accountant', 'facility_admin'),
    'appointments_summary': ('admin', 'receptionist', 'nurse', 'accountant', 'facility_admin'),
    'clerking_summary': ('admin', 'receptionist', 'nurse', 'facility_admin'),
    'billing_summary': ('admin', 'accountant', 'receptionist', 'facility_admin'),
}


def can_view_report_type(role: str | None, report_type: str) -> bool:
    if not role:
        return False
    if report_type not in REPORT_TYPE_ACCESS:
        return False
    if role == 'admin':
        return True
    return role in REPORT_TYPE_ACCESS[report_type]


def reports_for_role(role: str | None) -> list[str]:
    return [r for r in REPORT_TYPES if can_view_report_type(role, r)]

