"""
JWT session principal for the marketplace.

The principal is deliberately minimal: the email (``sub``) and the display
name (``name``). Tokens are delivered in httpOnly cookies so the API stays
stateless behind AWS Lambda.
"""
import os
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from django.conf import settings


# JWT Configuration
JWT_SECRET = os.getenv('JWT_SECRET', settings.SECRET_KEY)
JWT_ALGORITHM = 'HS256'
ACCESS_TOKEN_EXPIRE_MINUTES = 15
REFRESH_TOKEN_EXPIRE_DAYS = 7

ACCESS_COOKIE = 'access_token'
REFRESH_COOKIE = 'refresh_token'


def _encode(email: str, name: str, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        'sub': email,
        'name': name,
        'exp': now + lifetime,
        'iat': now,
        'type': token_type,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_access_token(email: str, name: str) -> str:
    """Short-lived access token, expires in 15 minutes."""
    return _encode(email, name, 'access', timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(email: str, name: str) -> str:
    """Long-lived refresh token, expires in 7 days."""
    return _encode(email, name, 'refresh', timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS))


def create_token_pair(email: str, name: str) -> Tuple[str, str]:
    """
    Create both access and refresh tokens.

    Returns:
        (access_token, refresh_token)
    """
    return create_access_token(email, name), create_refresh_token(email, name)


def decode_token(token: str, expected_type: Optional[str] = None) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded payload if valid, None if invalid, expired or of the wrong type.
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

    if expected_type and payload.get('type') != expected_type:
        return None
    return payload


def get_email_from_token(token: str, expected_type: str = 'access') -> Optional[str]:
    """Extract the principal email from a valid token."""
    payload = decode_token(token, expected_type)
    if payload and payload.get('sub'):
        return payload['sub']
    return None


# Cookie configuration
def get_cookie_settings(is_production: bool = False) -> dict:
    """
    Production: Secure, SameSite=Lax
    Development: Not secure (localhost), SameSite=Lax
    """
    return {
        'httponly': True,
        'secure': is_production,
        'samesite': 'Lax',
        'path': '/',
    }


def get_access_token_cookie_settings(is_production: bool = False) -> dict:
    cookie = get_cookie_settings(is_production)
    cookie['max_age'] = ACCESS_TOKEN_EXPIRE_MINUTES * 60
    return cookie


def get_refresh_token_cookie_settings(is_production: bool = False) -> dict:
    cookie = get_cookie_settings(is_production)
    cookie['max_age'] = REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
    return cookie
