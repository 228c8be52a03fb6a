"""Owner sign-in: bcrypt password hashes and bearer tokens for the agency owner."""
from passlib.context import CryptContext
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Tuple
import os

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_SECRET = os.getenv("JWT_SECRET", "renewal-desk-dev-secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))

MIN_PASSWORD_LENGTH = 8

# (check, message shown on the registration form)
PASSWORD_RULES = (
    (lambda p: any(c.isupper() for c in p), "Password needs an uppercase letter"),
    (lambda p: any(c.islower() for c in p), "Password needs a lowercase letter"),
    (lambda p: any(c.isdigit() for c in p), "Password needs a digit"),
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)

def create_access_token(claims: Dict, expires_in: Optional[timedelta] = None) -> str:
    """Signed token carrying the owner's ``user_id`` and ``email``."""
    expires_at = datetime.now(timezone.utc) + (expires_in or timedelta(hours=JWT_EXPIRATION_HOURS))
    return jwt.encode({**claims, "exp": expires_at}, JWT_SECRET, algorithm=JWT_ALGORITHM)

def decode_access_token(token: str) -> Optional[Dict]:
    """Token claims, or None when the token is malformed, forged or expired."""
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None

def validate_password_strength(password: str) -> Tuple[bool, str]:
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    for check, message in PASSWORD_RULES:
        if not check(password):
            return False, message
    return True, "Password accepted"
