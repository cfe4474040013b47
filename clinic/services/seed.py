"""
Read access to the bundled JSON fixtures.

The fixtures double as demo logins and as the read fallback served by
list endpoints when the database cannot be reached, so loading them
must never touch the ORM.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from django.conf import settings

logger = logging.getLogger(__name__)

SEED_FILES = {
    'users': 'users.json',
    'patient-clerking': 'patient-clerking.json',
    'appointments': 'appointments.json',
    'facilities': 'facilities.json',
}


def seed_dir() -> Path:
    return Path(settings.SEED_DATA_DIR)


@lru_cache(maxsize=None)
def _read(path: str) -> Any:
    with open(path, encoding='utf-8') as fh:
        return json.load(fh)


def load_seed(name: str) -> Any:
    """Return the parsed fixture ``name`` (one of :data:`SEED_FILES`)."""
    try:
        filename = SEED_FILES[name]
    except KeyError:
        raise ValueError(f'unknown seed fixture: {name}') from None
    return _read(str(seed_dir() / filename))


def clear_cache() -> None:
    _read.cache_clear()


def seed_users() -> list[dict]:
    data = load_seed('users')
    return data if isinstance(data, list) else []


def get_seed_user_by_email(email: str) -> Optional[dict]:
    if not email:
        return None
    wanted = email.strip().lower()
    for u in seed_users():
        if (u.get('email') or '').lower() == wanted:
            return u
    return None


def seed_clerking_records() -> list[dict]:
    return list(load_seed('patient-clerking').get('clerkingRecords') or [])


def seed_patients() -> list[dict]:
    return list(load_seed('patient-clerking').get('patients') or [])


def seed_appointments() -> list[dict]:
    data = load_seed('appointments')
    if isinstance(data, dict):
        data = data.get('appointments') or []
    return list(data)


def seed_facilities() -> list[dict]:
    data = load_seed('facilities')
    return data if isinstance(data, list) else []
