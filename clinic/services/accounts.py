"""
Account provisioning and token issuing.

Seed users (see :mod:`clinic.services.seed`) are mirrored into the
user table the first time they sign in, or in bulk by the
``load_seed`` management command.
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from clinic.models import User
from clinic.roles import is_role

logger = logging.getLogger(__name__)


@transaction.atomic
def provision_seed_user(record: dict) -> tuple[User, bool]:
    """Create the account for a seed record unless its e-mail exists.

    Returns ``(user, created)``.  The stored password is only set on
    creation so later password changes survive re-provisioning.
    """
    email = record['email'].strip().lower()
    user = User.objects.filter(email__iexact=email).first()
    if user:
        return user, False
    user = User(
        username=email,
        email=email,
        name=record.get('name') or '',
        role=record['role'],
        phone=record.get('phone'),
        status='active',
        activated_at=timezone.now(),
        is_staff=record['role'] == 'admin',
    )
    user.set_password(record['password'])
    user.save()
    logger.info('provisioned seed user %s (%s)', email, user.role)
    return user, True


def user_info(user, token: Optional[str] = None) -> dict:
    employee_id = getattr(user, 'employee_id', None)
    return {
        'id': user.id,
        'email': user.email,
        'name': getattr(user, 'display_name', None) or user.email,
        'role': user.role,
        'token': token,
        'staffId': str(employee_id) if employee_id else None,
        'employeeId': str(employee_id) if employee_id else None,
    }


def issue_tokens(user: User, *, from_local: bool = False) -> dict:
    """Legacy DRF token plus a JWT pair carrying the role claim."""
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    return {
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': user_info(user, token_obj.key),
        'fromLocal': from_local,
        'offline': False,
    }


def issue_offline_tokens(record: dict) -> dict:
    """Tokens for a seed user while the database is unreachable.

    The access token is self-contained (``offline`` claim) and there is
    no refresh token.
    """
    access = AccessToken()
    access['user_id'] = record.get('id') or record['email']
    access['role'] = record['role']
    access['email'] = record['email']
    access['name'] = record.get('name') or ''
    access['offline'] = True
    opaque = str(uuid.uuid4())
    return {
        'ok': True,
        'token': opaque,
        'jwt_access': str(access),
        'jwt_refresh': None,
        'role': record['role'],
        'user': {
            'id': record.get('id'),
            'email': record['email'],
            'name': record.get('name') or '',
            'role': record['role'],
            'token': opaque,
            'staffId': None,
            'employeeId': None,
        },
        'fromLocal': True,
        'offline': True,
    }


def seed_record_is_valid(record: dict) -> bool:
    return bool(record.get('email')) and bool(record.get('password')) and is_role(record.get('role'))
