import pytest
from rest_framework.test import APIClient

from clinic.module_permissions import (
    MODULES,
    can,
    can_create,
    can_delete,
    can_read,
    can_update,
    can_view_report_type,
    permission_for_method,
    permissions_for_role,
    reports_for_role,
)
from clinic.permissions import module_permission
from clinic.roles import ROLES, is_role, role_display_name


def test_admin_holds_every_permission_on_every_module():
    for module in MODULES:
        assert can_create('admin', module)
        assert can_read('admin', module)
        assert can_update('admin', module)
        assert can_delete('admin', module)


def test_matrix_examples():
    assert can('receptionist', 'patient_clerking', 'create')
    assert not can('receptionist', 'patient_clerking', 'delete')
    assert can('doctor', 'patient_clerking', 'read')
    assert not can('doctor', 'patient_clerking', 'update')
    assert can('accountant', 'appointments', 'update')
    assert not can('accountant', 'appointments', 'create')
    assert can('pharmacist', 'medicine_management', 'update')
    assert not can('nurse', 'medicine_management', 'read')


def test_unknown_inputs_never_grant():
    assert not can(None, 'patients', 'read')
    assert not can('', 'patients', 'read')
    assert not can('admin', 'no_such_module', 'read')
    assert not can('admin', 'patients', 'approve')
    assert not can('janitor', 'patients', 'read')


def test_permissions_for_role_covers_all_modules():
    matrix = permissions_for_role('lab_tech')
    assert set(matrix) == set(MODULES)
    assert matrix['lab_orders'] == {'create': True, 'read': True, 'update': True, 'delete': False}
    assert matrix['billing'] == {'create': False, 'read': False, 'update': False, 'delete': False}


def test_method_mapping():
    assert permission_for_method('get') == 'read'
    assert permission_for_method('PATCH') == 'update'
    assert permission_for_method('DELETE') == 'delete'
    assert permission_for_method('TRACE') is None


def test_report_visibility():
    assert reports_for_role('admin') == ['transactions', 'appointments_summary', 'clerking_summary', 'billing_summary']
    assert reports_for_role('accountant') == ['transactions', 'appointments_summary', 'billing_summary']
    assert reports_for_role('pharmacist') == []
    assert not can_view_report_type('admin', 'payroll')
    assert not can_view_report_type(None, 'transactions')


def test_roles():
    assert len(ROLES) == 8
    assert is_role('facility_admin')
    assert not is_role('Admin')
    assert not is_role(None)
    assert role_display_name('lab_tech') == 'Lab Tech'
    assert role_display_name('unknown') == 'unknown'


def test_module_permission_classes_are_cached_and_checked():
    assert module_permission('billing') is module_permission('billing')
    assert module_permission('billing').module_id == 'billing'
    with pytest.raises(ValueError):
        module_permission('payroll')


@pytest.mark.django_db
def test_unauthenticated_request_gets_error_envelope():
    r = APIClient().get('/api/patients')
    assert r.status_code == 401
    assert r.data['ok'] is False
    assert r.data['error']['code'] == 'not_authenticated'


@pytest.mark.django_db
@pytest.mark.parametrize('role,path,expected', [
    ('receptionist', '/api/staff', 403),
    ('facility_admin', '/api/staff', 200),
    ('pharmacist', '/api/appointments', 403),
    ('accountant', '/api/appointments', 200),
    ('nurse', '/api/pharmacy/stock', 403),
    ('pharmacist', '/api/pharmacy/stock', 200),
    ('doctor', '/api/users', 403),
    ('receptionist', '/api/invoices', 200),
    ('lab_tech', '/api/clerking', 403),
])
def test_module_gate_on_read(client_for, role, path, expected):
    r = client_for(role).get(path)
    assert r.status_code == expected
    if expected == 403:
        assert r.data['error']['code'] == 'permission_denied'


@pytest.mark.django_db
def test_write_needs_the_matching_operation(client_for):
    # doctors may read clerking records but not create them
    doctor = client_for('doctor')
    assert doctor.get('/api/clerking').status_code == 200
    r = doctor.post('/api/clerking', {'patientName': 'A'}, format='json')
    assert r.status_code == 403


@pytest.mark.django_db
def test_my_permissions(client_for):
    r = client_for('receptionist').get('/api/auth/permissions')
    assert r.status_code == 200
    assert r.data['role'] == 'receptionist'
    assert 'appointments' in r.data['modules']
    assert 'staff' not in r.data['modules']
    assert r.data['permissions']['patients']['create'] is True
    assert r.data['reports'] == ['appointments_summary', 'clerking_summary', 'billing_summary']


@pytest.mark.django_db
def test_roles_catalogue(client_for):
    r = client_for('nurse').get('/api/roles')
    assert r.status_code == 200
    assert {'id': 'lab_tech', 'name': 'Lab Tech'} in r.data['roles']
    assert len(r.data['roles']) == 8
