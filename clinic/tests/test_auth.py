import pytest
from django.db import OperationalError
from rest_framework.test import APIClient

from clinic.models import AuditEvent, User

pytestmark = pytest.mark.django_db

SEED_ADMIN = {'email': 'admin@ahmis.com', 'password': 'admin123'}


def login(client, email, password):
    return client.post('/api/auth/login', {'email': email, 'password': password}, format='json')


def test_seed_login_provisions_the_account():
    client = APIClient()
    r = login(client, 'Admin@Ahmis.com', 'admin123')
    assert r.status_code == 200
    assert r.data['ok'] is True
    assert r.data['role'] == 'admin'
    assert r.data['fromLocal'] is True
    assert r.data['offline'] is False
    assert r.data['token'] and r.data['jwt_access'] and r.data['jwt_refresh']
    user = User.objects.get(email='admin@ahmis.com')
    assert user.is_staff
    assert r.data['user']['id'] == user.id
    assert AuditEvent.objects.filter(action='login', user=user).exists()

    # second login reuses the account and its legacy token
    again = login(client, **SEED_ADMIN)
    assert again.data['token'] == r.data['token']
    assert User.objects.filter(email='admin@ahmis.com').count() == 1


def test_login_requires_both_fields():
    r = login(APIClient(), 'admin@ahmis.com', '')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'Email and password required'


def test_login_failures(make_user):
    make_user('nurse', email='agnes@clinic.test', password='right-password')
    client = APIClient()
    r = login(client, 'agnes@clinic.test', 'wrong')
    assert r.status_code == 401
    assert r.data['error']['message'] == 'Invalid password'
    r = login(client, 'nobody@clinic.test', 'whatever')
    assert r.status_code == 401
    assert r.data['error']['message'] == 'Invalid email or password'


def test_inactive_account_cannot_login(make_user):
    make_user('nurse', email='agnes@clinic.test', password='right-password', status='suspended')
    r = login(APIClient(), 'agnes@clinic.test', 'right-password')
    assert r.status_code == 401
    assert r.data['error']['message'] == 'Account is not active'


def test_database_user_login_and_me(make_user):
    make_user('accountant', email='tom@clinic.test', password='right-password', name='Tom Accountant')
    client = APIClient()
    r = login(client, 'tom@clinic.test', 'right-password')
    assert r.status_code == 200
    assert r.data['fromLocal'] is False

    client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    me = client.get('/api/auth/me')
    assert me.status_code == 200
    assert me.data['user']['name'] == 'Tom Accountant'
    assert me.data['user']['roleName'] == 'Accountant'
    assert me.data['user']['offline'] is False
    assert me.data['permissions']['billing']['create'] is True
    assert me.data['reports'] == ['transactions', 'appointments_summary', 'billing_summary']

    bearer = APIClient()
    bearer.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    assert bearer.get('/api/auth/me').data['user']['email'] == 'tom@clinic.test'


def test_tokens_of_deactivated_accounts_are_refused(make_user):
    user = make_user('nurse', email='agnes@clinic.test', password='right-password')
    client = APIClient()
    token = login(client, 'agnes@clinic.test', 'right-password').data['token']
    user.status = 'inactive'
    user.save()
    client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
    assert client.get('/api/auth/me').status_code == 401


def test_refresh_and_logout():
    client = APIClient()
    tokens = login(client, **SEED_ADMIN).data
    r = client.post('/api/auth/refresh', {'refresh': tokens['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access']
    fresh_refresh = r.data['jwt_refresh']

    client.credentials(HTTP_AUTHORIZATION=f"Token {tokens['token']}")
    r = client.post('/api/auth/logout', {'refresh': fresh_refresh}, format='json')
    assert r.status_code == 200
    assert r.data == {'ok': True, 'blacklisted': 1}
    assert client.get('/api/auth/me').status_code == 401

    anon = APIClient()
    r = anon.post('/api/auth/refresh', {'jwt_refresh': fresh_refresh}, format='json')
    assert r.status_code == 401


def test_refresh_rejects_garbage():
    r = APIClient().post('/api/auth/refresh', {'refresh': 'not-a-token'}, format='json')
    assert r.status_code == 401


def test_seed_login_without_database(monkeypatch):
    def unavailable(record):
        raise OperationalError('could not connect to server')

    monkeypatch.setattr('clinic.auth_views.provision_seed_user', unavailable)
    client = APIClient()
    r = login(client, **SEED_ADMIN)
    assert r.status_code == 200
    assert r.data['offline'] is True
    assert r.data['fromLocal'] is True
    assert r.data['jwt_refresh'] is None
    assert r.data['user']['id'] == 'seed-admin'
    assert not User.objects.filter(email='admin@ahmis.com').exists()

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    me = client.get('/api/auth/me')
    assert me.status_code == 200
    assert me.data['user']['offline'] is True
    assert me.data['user']['role'] == 'admin'
    assert me.data['user']['email'] == 'admin@ahmis.com'
    assert client.get('/api/roles').status_code == 200


def test_seed_record_with_bad_role(monkeypatch):
    monkeypatch.setattr(
        'clinic.auth_views.get_seed_user_by_email',
        lambda email: {'email': email, 'password': 'pw', 'role': 'superuser'},
    )
    r = login(APIClient(), 'ghost@ahmis.com', 'pw')
    assert r.status_code == 500
    assert r.data['error']['code'] == 'invalid_seed'
