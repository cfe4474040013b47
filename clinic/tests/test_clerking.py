import uuid

import pytest

from clinic.models import PatientClerking

pytestmark = pytest.mark.django_db


def arrival(**extra):
    body = {
        'patientName': 'Grace Nambi',
        'patientId': 'OPD-2025-0007',
        'arrivalSource': 'OPD',
        'dateOfArrival': '2025-03-11',
        'timeOfArrival': '10:15',
        'status': 'Pending assessment',
        'phone': '0700555666',
    }
    body.update(extra)
    return body


def test_create_records_the_callers_role(client_for):
    r = client_for('nurse').post('/api/clerking', arrival(), format='json')
    assert r.status_code == 201
    assert r.data['recordedBy'] == 'nurse'
    assert r.data['arrivalSource'] == 'OPD'
    assert r.data['dateOfArrival'] == '2025-03-11'
    assert PatientClerking.objects.count() == 1


def test_explicit_recorder_is_kept(client_for):
    r = client_for('receptionist').post('/api/clerking', arrival(recordedBy='front desk'), format='json')
    assert r.data['recordedBy'] == 'front desk'


@pytest.mark.parametrize('override,message', [
    ({'patientName': ''}, 'Patient name is required'),
    ({'arrivalSource': 'Helicopter'}, 'Invalid arrival source'),
    ({'dateOfArrival': None}, 'Date and time of arrival are required'),
    ({'status': 'Discharged'}, 'Invalid status'),
])
def test_create_validation(client_for, override, message):
    body = arrival()
    for key, value in override.items():
        if value is None:
            body.pop(key)
        else:
            body[key] = value
    r = client_for('receptionist').post('/api/clerking', body, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == message
    assert not PatientClerking.objects.exists()


def test_time_of_arrival_format(client_for):
    r = client_for('receptionist').post('/api/clerking', arrival(timeOfArrival='quarter past ten'), format='json')
    assert r.status_code == 400
    assert 'timeOfArrival' in r.data['error']['fields']


def test_list_newest_first(client_for):
    client = client_for('receptionist')
    client.post('/api/clerking', arrival(patientName='First'), format='json')
    client.post('/api/clerking', arrival(patientName='Second'), format='json')
    r = client.get('/api/clerking')
    assert [x['patientName'] for x in r.data['records']] == ['Second', 'First']


def test_put_replaces_the_record(client_for):
    client = client_for('receptionist')
    created = client.post('/api/clerking', arrival(), format='json').data
    body = arrival(status='Assessed', arrivalSource='Emergency Department', recordedBy='someone else')
    body.pop('phone')
    r = client.put(f"/api/clerking/{created['id']}", body, format='json')
    assert r.status_code == 200
    assert r.data['status'] == 'Assessed'
    assert r.data['arrivalSource'] == 'Emergency Department'
    assert r.data['phone'] is None
    assert r.data['recordedBy'] == 'receptionist'
    assert r.data['createdAt'] == created['createdAt']


def test_put_validates_like_create(client_for):
    client = client_for('receptionist')
    created = client.post('/api/clerking', arrival(), format='json').data
    r = client.put(f"/api/clerking/{created['id']}", arrival(status='Gone'), format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'Invalid status'


def test_delete_is_admin_only(client_for):
    created = client_for('receptionist').post('/api/clerking', arrival(), format='json').data
    assert client_for('nurse').delete(f"/api/clerking/{created['id']}").status_code == 403

    admin = client_for('admin')
    r = admin.delete(f"/api/clerking/{created['id']}")
    assert r.status_code == 200
    assert r.data == {'success': True}
    r = admin.get(f"/api/clerking/{created['id']}")
    assert r.status_code == 404
    assert r.data['error']['message'] == 'Record not found'


def test_missing_record(client_for):
    r = client_for('admin').put(f'/api/clerking/{uuid.uuid4()}', arrival(), format='json')
    assert r.status_code == 404


def test_list_falls_back_to_seed_data(client_for, database_down, monkeypatch):
    monkeypatch.setattr('clinic.views.clerking.PatientClerking', database_down)
    r = client_for('nurse').get('/api/clerking')
    assert r.status_code == 200
    assert [x['id'] for x in r.data['records']] == ['clk-seed-1', 'clk-seed-2']
    assert r.data['records'][0]['createdAt'] == '2025-03-10T08:47:00Z'
