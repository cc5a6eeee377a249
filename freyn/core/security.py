"""Security utilities: password hashing, credential rules and JWT helpers."""

import re
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from freyn.core.config import get_settings

settings = get_settings()

EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")
FULL_NAME_PATTERN = re.compile(r"^[a-zA-Z\s]+$")

TOKEN_COOKIE = "token"
TOKEN_MAX_AGE = 7 * 24 * 60 * 60

# ── Password hashing (Argon2) ────────────────────────────────

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    return pwd_context.verify(plain, hashed)


# ── Credential rules ─────────────────────────────────────────

def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str | None) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def validate_password(password: str | None) -> str | None:
    """Return the message of the first rule the password breaks, or None."""
    if not password or len(password) < 8:
        return "Password must be at least 8 characters long"
    if not re.search(r"[a-z]", password):
        return "Password must contain at least one lowercase letter"
    if not re.search(r"[A-Z]", password):
        return "Password must contain at least one uppercase letter"
    if not re.search(r"\d", password):
        return "Password must contain at least one number"
    return None


def validate_full_name(full_name: str | None) -> str | None:
    name = (full_name or "").strip()
    if len(name) < 2:
        return "Full name must be at least 2 characters long"
    if not FULL_NAME_PATTERN.match(name):
        return "Full name can only contain letters and spaces"
    return None


# ── JWT ───────────────────────────────────────────────────────

def create_jwt(
    subject: str,
    workspace_id: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.jwt_expire_days)
    )
    payload: dict = {"sub": subject, "exp": expire}
    if workspace_id:
        payload["wid"] = workspace_id
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str | None) -> dict | None:
    """Decode and verify a JWT. Returns None on any failure."""
    if not token:
        return None
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None
    if not isinstance(payload.get("sub"), str):
        return None
    return payload


def extract_token(authorization: str | None, cookie_token: str | None) -> str | None:
    """Bearer header wins over the ``token`` cookie."""
    if authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):].strip()
        if token:
            return token
    return cookie_token or None
