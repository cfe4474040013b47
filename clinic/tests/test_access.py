import pytest

from clinic.models import PatientDataAccessRule
from clinic.services.access import (
    DEFAULT_PATIENT_DATA_ACCESS,
    PATIENT_DATA_CATEGORIES,
    can_access_patient_data,
    get_access_config,
)

pytestmark = pytest.mark.django_db


def test_defaults():
    assert get_access_config() == DEFAULT_PATIENT_DATA_ACCESS
    assert can_access_patient_data('doctor', 'clinical_notes', 'edit')
    assert not can_access_patient_data('receptionist', 'clinical_notes')
    assert can_access_patient_data('lab_tech', 'lab_results', 'view')
    assert not can_access_patient_data('admin', 'genome')
    assert not can_access_patient_data('admin', 'billing', 'delete')
    assert not can_access_patient_data(None, 'billing')


def test_any_staff_role_can_read_the_policy(client_for):
    r = client_for('pharmacist').get('/api/settings/patient-data-access')
    assert r.status_code == 200
    assert r.data['categories'] == list(PATIENT_DATA_CATEGORIES)
    assert r.data['access']['billing']['edit'] == ['admin', 'accountant']


def test_only_system_admin_may_change_it(client_for):
    r = client_for('facility_admin').put('/api/settings/patient-data-access',
                                         {'billing': {'view': ['admin']}}, format='json')
    assert r.status_code == 403
    assert not PatientDataAccessRule.objects.exists()


def test_update_merges_per_category(client_for):
    admin = client_for('admin')
    r = admin.put('/api/settings/patient-data-access',
                  {'lab_results': {'view': ['admin', 'doctor', 'doctor']}}, format='json')
    assert r.status_code == 200
    assert r.data['access']['lab_results'] == {'view': ['admin', 'doctor'], 'edit': ['admin', 'lab_tech']}
    assert r.data['access']['billing'] == DEFAULT_PATIENT_DATA_ACCESS['billing']
    rule = PatientDataAccessRule.objects.get(category='lab_results')
    assert rule.updated_by == admin.user
    assert not can_access_patient_data('lab_tech', 'lab_results')


@pytest.mark.parametrize('body', [
    {'genome': {'view': ['admin']}},
    {'billing': {'view': ['admin', 'janitor']}},
    {'billing': {'view': 'admin'}},
    {'billing': ['admin']},
])
def test_invalid_updates(client_for, body):
    r = client_for('admin').put('/api/settings/patient-data-access', body, format='json')
    assert r.status_code == 400
    assert not PatientDataAccessRule.objects.exists()
