"""
Custom authentication backends for token-based auth.

Login hands out both an opaque DRF token (``Authorization: Token
<key>``) and a JWT pair (``Authorization: Bearer <jwt>``); keeping the
keywords distinct lets both classes sit in the default chain.

When the database is unreachable, seed users still sign in and receive
an access token marked ``offline``.  Such tokens carry the role claim
themselves and are resolved to a stateless ``TokenUser`` without a
database lookup.
"""
from __future__ import annotations

from rest_framework import authentication, exceptions
from rest_framework_simplejwt import authentication as jwt_authentication
from rest_framework_simplejwt.models import TokenUser


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication that refuses soft-deleted or inactive accounts."""

    keyword = 'Token'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        if getattr(user, 'deleted_at', None) is not None or getattr(user, 'status', 'active') != 'active':
            raise exceptions.AuthenticationFailed('User inactive or deleted.')
        return user, token


class JWTAuthentication(jwt_authentication.JWTAuthentication):

    def get_user(self, validated_token):
        if validated_token.get('offline'):
            return TokenUser(validated_token)
        user = super().get_user(validated_token)
        if getattr(user, 'deleted_at', None) is not None:
            raise exceptions.AuthenticationFailed('User inactive or deleted.')
        return user
