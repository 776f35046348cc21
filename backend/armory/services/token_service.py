# Overview: Service-layer operations for bearer tokens.

"""
Bearer Token Service

Tokens are stateless: a signed, timestamped payload of
{id, email, role, baseId} produced with itsdangerous and the app's
SECRET_KEY. Nothing is stored server-side, so logout is advisory (the
client discards the token) and a token stays valid until it expires.

SECURITY FEATURES:
- HMAC-signed payload; any tampering fails verification
- Absolute expiry of TOKEN_MAX_AGE_SECONDS (24 hours by default)
- Salted per purpose so tokens cannot be replayed as other signed values
"""

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..models import User
from .access_policy import Principal


TOKEN_SALT = "armory-auth-token"


class TokenError(Exception):
    """Raised when a bearer token is invalid or expired."""
    pass


class TokenExpiredError(TokenError):
    pass


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def issue_token(user: User) -> str:
    """Sign the caller identity that every later request is authorized against."""
    return _serializer().dumps({
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "baseId": user.base_id,
    })


def verify_token(token: str) -> Principal:
    """
    Verify signature and age, and return the encoded identity.

    Raises TokenExpiredError or TokenError.
    """
    max_age = current_app.config.get("TOKEN_MAX_AGE_SECONDS", 24 * 60 * 60)
    try:
        claims = _serializer().loads(token, max_age=max_age)
    except SignatureExpired as exc:
        raise TokenExpiredError("Token expired") from exc
    except BadSignature as exc:
        raise TokenError("Invalid token") from exc

    try:
        return Principal(
            user_id=int(claims["id"]),
            email=claims["email"],
            role=claims["role"],
            base_id=claims.get("baseId"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise TokenError("Malformed token payload") from exc
