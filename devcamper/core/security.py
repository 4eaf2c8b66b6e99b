"""Password hashing and the tokens that identify a signed-in user."""
import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

TOKEN_ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class InvalidToken(Exception):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)

def issue_access_token(user_id, role: str, secret: str, expire_days: int, issued_at: datetime | None = None) -> str:
    issued_at = issued_at or datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "role": role,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(days=expire_days)).timestamp()),
    }
    return jwt.encode(claims, secret, algorithm=TOKEN_ALGORITHM)

def read_access_token(token: str, secret: str) -> UUID:
    """Return the user id a token was issued for.

    Raises :class:`InvalidToken` for a bad signature, an expired token, or a
    subject that is not a user id.
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[TOKEN_ALGORITHM])
        return UUID(str(claims.get("sub") or ""))
    except (JWTError, ValueError) as exc:
        raise InvalidToken(str(exc)) from exc

def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

def generate_reset_token() -> tuple[str, str]:
    """Return ``(token, token_hash)``; only the hash is persisted."""
    token = secrets.token_hex(20)
    return token, hash_reset_token(token)
