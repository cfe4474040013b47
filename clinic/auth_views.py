"""
Authentication views.

This module defines the login endpoint used by the front-end along
with token refresh, logout and "who am I".  By isolating these views
from the authentication classes (see ``clinic.authentication``) we
prevent circular imports when Django REST framework initialises
authentication classes.
"""
from __future__ import annotations

import logging

from django.db import DatabaseError
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import APIException, AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from .exceptions import BadRequest
from .models import User
from .module_permissions import permissions_for_role, reports_for_role
from .roles import is_role, role_display_name
from .serializers.auth import LoginSerializer
from .services.accounts import issue_offline_tokens, issue_tokens, provision_seed_user, user_info
from .services.audit import log_action
from .services.seed import get_seed_user_by_email

logger = logging.getLogger(__name__)


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


class InvalidSeedRole(APIException):
    status_code = 500
    default_detail = 'Invalid role in seed'
    default_code = 'invalid_seed'


def _audit_login(request, user, result, email):
    try:
        log_action(user=user, action='login', object_type='user', object_id=getattr(user, 'id', None),
                   request=request, detail={'result': result, 'email': email})
    except DatabaseError:
        logger.warning('login audit skipped: database unavailable')


# ---------------------------------------------------------------------
# E-mail/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """
    Sign in with ``email`` and ``password``.

    Seed users are checked first so that the demo accounts keep working
    when the database is down; they are mirrored into the user table on
    first login.  Without a database the seed login still succeeds with
    an offline token.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    email = (s.validated_data.get('email') or '').strip()
    password = s.validated_data.get('password') or ''
    if not email or not password:
        raise BadRequest('Email and password required')

    seed_user = get_seed_user_by_email(email)
    if seed_user and seed_user.get('password') == password:
        if not is_role(seed_user.get('role')):
            raise InvalidSeedRole()
        try:
            user, _ = provision_seed_user(seed_user)
            if user.deleted_at is not None or user.status != 'active':
                raise AuthenticationFailed('Account is not active')
            payload = issue_tokens(user, from_local=True)
        except DatabaseError as exc:
            logger.warning('seed login for %s without database (%s)', email, exc)
            return Response(issue_offline_tokens(seed_user))
        _audit_login(request, user, 'ok', email)
        return Response(payload)

    try:
        user = User.objects.filter(email__iexact=email, deleted_at__isnull=True).first()
    except DatabaseError as exc:
        logger.warning('login for %s: database unavailable (%s)', email, exc)
        user = None
    if user:
        if not user.check_password(password):
            _audit_login(request, None, 'fail', email)
            raise AuthenticationFailed('Invalid password')
        if user.status != 'active' or not user.is_active:
            raise AuthenticationFailed('Account is not active')
        _audit_login(request, user, 'ok', email)
        return Response(issue_tokens(user))
    raise AuthenticationFailed('Invalid email or password')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    """The authenticated caller, resolved from its token."""
    user = request.user
    role = getattr(user, 'role', None)
    if isinstance(user, User):
        info = user_info(user)
        info.pop('token')
    else:
        info = {
            'id': user.id,
            'email': getattr(user, 'email', None),
            'name': getattr(user, 'name', None),
            'role': role,
            'staffId': None,
            'employeeId': None,
        }
    info['roleName'] = role_display_name(role) if is_role(role) else None
    info['offline'] = not isinstance(user, User)
    return Response({
        'user': info,
        'permissions': permissions_for_role(role),
        'reports': reports_for_role(role),
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    refresh = request.data.get('refresh') or request.data.get('jwt_refresh')
    s = TokenRefreshSerializer(data={'refresh': refresh})
    try:
        s.is_valid(raise_exception=True)
    except TokenError as exc:
        raise AuthenticationFailed(str(exc)) from None
    data = dict(s.validated_data)
    out = {'ok': True, 'jwt_access': data['access']}
    if 'refresh' in data:
        out['jwt_refresh'] = data['refresh']
    return Response(out)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the caller's refresh tokens (all or a given one) and drop the legacy token."""
    refresh = request.data.get('refresh') or request.data.get('jwt_refresh')
    count = 0
    if not isinstance(request.user, User):
        return Response({'ok': True, 'blacklisted': 0})
    if refresh:
        try:
            token = RefreshToken(refresh)
        except TokenError as exc:
            raise BadRequest(str(exc)) from None
        if str(token.get('user_id')) != str(request.user.id):
            raise BadRequest('Token does not belong to this user')
        token.blacklist()
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id, request=request)
    return Response({'ok': True, 'blacklisted': count})
