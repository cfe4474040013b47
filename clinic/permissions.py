"""
Custom permission classes for role and module based access control.

The module matrix in :mod:`clinic.module_permissions` is enforced per
request by mapping the HTTP method onto a create/read/update/delete
operation.
"""
from rest_framework.permissions import BasePermission

from .module_permissions import MODULES, REPORT_TYPES, can, can_view_report_type, permission_for_method
from .roles import is_role

ADMIN_ROLES = {"admin", "facility_admin"}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    role = getattr(user, "role", None)
    return role if is_role(role) else None


class IsStaffRole(BasePermission):
    """Any authenticated user carrying a known role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) is not None


class IsAdminRole(BasePermission):
    """Admin or facility admin."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in ADMIN_ROLES


class IsAdmin(BasePermission):
    """Only the system admin."""
    def has_permission(self, request, view) -> bool:
        return _role(request) == "admin"


class ModulePermission(BasePermission):
    """Gate a view on the permission matrix.

    Subclasses (see :func:`module_permission`) set ``module_id``; the
    operation is derived from the request method.
    """
    module_id: str = ""
    message = "You do not have permission to perform this action on this module."

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        role = _role(request)
        operation = permission_for_method(request.method)
        if not role or not operation:
            return False
        return can(role, self.module_id, operation)


_module_permission_classes: dict[str, type[ModulePermission]] = {}


def module_permission(module_id: str) -> type[ModulePermission]:
    """Return the (cached) permission class guarding ``module_id``."""
    if module_id not in MODULES:
        raise ValueError(f"unknown module: {module_id}")
    cls = _module_permission_classes.get(module_id)
    if cls is None:
        cls = type(f"{module_id.title().replace('_', '')}Permission", (ModulePermission,), {"module_id": module_id})
        _module_permission_classes[module_id] = cls
    return cls


class CanViewReport(BasePermission):
    """Report visibility; expects the ``report_type`` URL kwarg."""
    message = "You do not have access to this report."

    def has_permission(self, request, view) -> bool:
        report_type = (getattr(view, "kwargs", None) or {}).get("report_type", "")
        if report_type not in REPORT_TYPES:
            # unknown types are answered with 404 by the view
            return _role(request) is not None
        return can_view_report_type(_role(request), report_type)
