# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

WHY: Every purchase, transfer and assignment must be attributable to a
named user. Uses bcrypt for password hashing.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, at least one letter and one digit
- Bearer tokens are issued separately (see token_service.py)
- Emails are unique system-wide and double as the login identifier
"""

import bcrypt
import re
from ..extensions import db
from ..models import User, Base
from ..validation import ConflictError, ValidationError, enforce_rules_user


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter_by(email=normalize_email(email)).first()


def create_user(
    *,
    name: str,
    email: str,
    password: str,
    role: str,
    base_id: int | None = None,
) -> User:
    """
    Create a new user with a bcrypt password hash.

    Does not commit; callers commit together with the audit entry.

    Raises:
        ValidationError: bad role/email/name, unknown base, weak password
        ConflictError: email already registered
    """
    enforce_rules_user(role, email)
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is required")

    email = normalize_email(email)

    if get_user_by_email(email):
        raise ConflictError("A user with this email already exists")

    if base_id is not None:
        if isinstance(base_id, bool) or not isinstance(base_id, int):
            raise ValidationError("baseId must be an integer")
        base = db.session.query(Base).filter_by(id=base_id).first()
        if not base:
            raise ValidationError("Base not found")

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=role,
        base_id=base_id,
    )

    db.session.add(user)
    db.session.flush()
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate user with email and password.

    Returns User if credentials valid, None otherwise.

    WHY: Central authentication function. All login flows go through here.
    """
    user = get_user_by_email(email)

    if not user:
        return None

    if verify_password(password, user.password_hash):
        return user

    return None


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.name.asc()).all()
