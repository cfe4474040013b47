import pytest
from django.core.cache import cache
from django.db import OperationalError
from rest_framework.test import APIClient

from clinic.models import User
from clinic.services import seed


@pytest.fixture(autouse=True)
def _fresh_caches():
    """Throttle counters, cached reports and parsed fixtures never leak between tests."""
    cache.clear()
    seed.clear_cache()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    counter = {'n': 0}

    def make(role='admin', email=None, password='Secret-pass-1', **extra):
        counter['n'] += 1
        email = email or f"{role}{counter['n']}@clinic.test"
        extra.setdefault('name', f"{role.replace('_', ' ').title()} {counter['n']}")
        return User.objects.create_user(username=email, email=email, password=password, role=role, **extra)

    return make


@pytest.fixture
def client_for(make_user):
    """``client_for('nurse')`` -> APIClient authenticated as a fresh nurse (``client.user``)."""
    def build(role='admin', **extra):
        user = make_user(role, **extra)
        client = APIClient()
        client.force_authenticate(user=user)
        client.user = user
        return client

    return build


class _Unreachable:
    def __getattr__(self, name):
        raise OperationalError('could not connect to server: Connection refused')


class DatabaseDown:
    """Stand-in for a model class whose manager cannot reach the database."""
    objects = _Unreachable()


@pytest.fixture
def database_down():
    return DatabaseDown
